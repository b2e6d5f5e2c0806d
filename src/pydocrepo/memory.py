"""In-process document source.

Useful for tests and for running repositories without a database. It
evaluates :class:`DocumentQuery` objects against plain dicts and records
every query it executes.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydocrepo.models.document import Document, QueryResult
from pydocrepo.query import DocumentQuery, IdOperator

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MemoryDocumentSource:
    """Document source backed by ``{collection: {doc_id: data}}``.

    Set :attr:`available` to ``False`` to simulate an unreachable database:
    every query then returns ``None``. ``prefer_cache`` is recorded but has
    no effect, the data always lives in memory.
    """

    def __init__(self, collections: Mapping[str, Mapping[str, Mapping[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self.available = True
        self.queries: list[tuple[DocumentQuery, bool]] = []
        for collection, documents in (collections or {}).items():
            for doc_id, data in documents.items():
                self.set_document(collection, doc_id, data)

    @property
    def query_count(self) -> int:
        return len(self.queries)

    def set_document(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> Document:
        """Create or replace a document."""
        now = _utcnow()
        existing = self._collections.get(collection, {}).get(doc_id)
        document = Document(
            id=doc_id,
            data=copy.deepcopy(dict(data)),
            create_time=existing.create_time if existing is not None else now,
            update_time=now,
        )
        self._collections.setdefault(collection, {})[doc_id] = document
        return document

    def delete_document(self, collection: str, doc_id: str) -> None:
        self._collections.get(collection, {}).pop(doc_id, None)

    def documents(self, collection: str) -> dict[str, Document]:
        return dict(self._collections.get(collection, {}))

    async def run_query(self, query: DocumentQuery, prefer_cache: bool) -> QueryResult | None:
        self.queries.append((query, prefer_cache))
        if not self.available:
            _logger.debug("Memory source unavailable, dropping query on %s", query.collection)
            return None

        stored = self._collections.get(query.collection, {})
        if query.where.op is IdOperator.EQUAL:
            candidates = [query.ids[0]]
        else:
            candidates = list(dict.fromkeys(query.ids))

        matches = [stored[doc_id] for doc_id in candidates if doc_id in stored]
        if query.limit is not None:
            matches = matches[: query.limit]
        return QueryResult(documents=matches, read_time=_utcnow())
