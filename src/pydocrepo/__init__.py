"""pydocrepo - Async cached repositories over a remote document database."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydocrepo")
except PackageNotFoundError:
    __version__ = "0+local"
from pydocrepo._constants import ARRAY_QUERIES_ITEM_LIMIT
from pydocrepo.config import SourceConfig
from pydocrepo.exceptions import (
    ChunkSizeError,
    DocRepoApiError,
    DocRepoConfigError,
    DocRepoError,
    DocRepoQueryError,
    DocRepoTransportError,
)
from pydocrepo.memory import MemoryDocumentSource
from pydocrepo.models import (
    Document,
    HasId,
    QueryResult,
    RepoModel,
    RepoUpdate,
    RepoUpdateType,
)
from pydocrepo.query import DocumentQuery, IdFilter, IdOperator
from pydocrepo.repository import DocumentRepository
from pydocrepo.rest import RestDocumentSource
from pydocrepo.source import DocumentSource
from pydocrepo.state.broadcaster import Subscription, UpdateBroadcaster
from pydocrepo.state.store import ModelStore

__all__ = [
    "__version__",
    "ARRAY_QUERIES_ITEM_LIMIT",
    "ChunkSizeError",
    "DocRepoApiError",
    "DocRepoConfigError",
    "DocRepoError",
    "DocRepoQueryError",
    "DocRepoTransportError",
    "Document",
    "DocumentQuery",
    "DocumentRepository",
    "DocumentSource",
    "HasId",
    "IdFilter",
    "IdOperator",
    "MemoryDocumentSource",
    "ModelStore",
    "QueryResult",
    "RepoModel",
    "RepoUpdate",
    "RepoUpdateType",
    "RestDocumentSource",
    "SourceConfig",
    "Subscription",
    "UpdateBroadcaster",
]
