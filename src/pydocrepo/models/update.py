"""Repository update records.

A :class:`RepoUpdate` is the unit of change notification: listeners
receive lists of them. They are never stored.
"""

from __future__ import annotations

from collections.abc import Hashable
from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

IdT = TypeVar("IdT", bound=Hashable)


class RepoUpdateType(StrEnum):
    FETCHED = "fetched"
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class RepoUpdate(BaseModel, Generic[IdT]):
    """One change to one model in a repository."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: IdT
    type: RepoUpdateType
