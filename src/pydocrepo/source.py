"""Document source interface used by repositories."""

from __future__ import annotations

from typing import Protocol

from pydocrepo.models.document import QueryResult
from pydocrepo.query import DocumentQuery


class DocumentSource(Protocol):
    """Structural interface for remote query execution.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementations (`RestDocumentSource`,
    `MemoryDocumentSource`) concrete.
    """

    async def run_query(self, query: DocumentQuery, prefer_cache: bool) -> QueryResult | None:
        """Execute *query*.

        Returns ``None`` when the query could not be executed (network
        failure, service unavailable). Remote failures are never raised.
        """
        ...
