"""Custom exception hierarchy for pydocrepo."""

from __future__ import annotations


class DocRepoError(Exception):
    """Base exception for all pydocrepo errors."""


class DocRepoConfigError(DocRepoError):
    """Invalid or missing configuration."""


class DocRepoQueryError(DocRepoError):
    """A query could not be built as requested."""


class ChunkSizeError(DocRepoQueryError, ValueError):
    """An "id in list" query received more ids than the fan-out limit.

    Chunks are split at the limit before any query is built, so this
    indicates a construction bug rather than bad input.
    """

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"chunk of {size} ids exceeds the fan-out limit of {limit}")


class DocRepoTransportError(DocRepoError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class DocRepoApiError(DocRepoError):
    """The document service answered with an error object."""

    def __init__(
        self,
        message: str,
        *,
        status: str = "",
        url: str = "",
    ) -> None:
        self.status = status
        self.url = url
        super().__init__(message)
