"""Data models for repositories and document sources."""

from pydocrepo.models._base import HasId, RepoModel
from pydocrepo.models.document import Document, QueryResult
from pydocrepo.models.update import RepoUpdate, RepoUpdateType

__all__ = [
    "Document",
    "HasId",
    "QueryResult",
    "RepoModel",
    "RepoUpdate",
    "RepoUpdateType",
]
