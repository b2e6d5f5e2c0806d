"""Raw payloads produced by a document source."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """A document as returned by the remote database, before materialization."""

    model_config = ConfigDict(frozen=True)

    id: str
    data: dict[str, Any] = Field(default_factory=dict)
    create_time: datetime | None = None
    update_time: datetime | None = None


class QueryResult(BaseModel):
    """Documents matching one query. May be empty."""

    model_config = ConfigDict(frozen=True)

    documents: list[Document] = Field(default_factory=list)
    read_time: datetime | None = None
    from_cache: bool = False

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def is_empty(self) -> bool:
        return not self.documents
