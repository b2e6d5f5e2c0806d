"""Query builder for identifier lookups.

Repositories only ever ask a document source for documents by id: either
one id (``id_equals``) or a bounded list of ids (``id_in``). Sources
interpret :class:`DocumentQuery` directly; :meth:`DocumentQuery.to_structured_query`
renders it for the REST API.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pydocrepo._constants import ARRAY_QUERIES_ITEM_LIMIT, DOCUMENT_ID_FIELD
from pydocrepo.exceptions import ChunkSizeError, DocRepoQueryError


class IdOperator(StrEnum):
    EQUAL = "EQUAL"
    IN = "IN"


class IdFilter(BaseModel):
    """Constraint on the document id."""

    model_config = ConfigDict(frozen=True)

    op: IdOperator
    ids: tuple[str, ...]

    def matches(self, doc_id: str) -> bool:
        return doc_id in self.ids


class DocumentQuery(BaseModel):
    """A query against one collection, constrained on document ids."""

    model_config = ConfigDict(frozen=True)

    collection: str
    where: IdFilter
    limit: int | None = Field(default=None, gt=0)

    @field_validator("collection")
    @classmethod
    def _normalize_collection(cls, value: str) -> str:
        collection = value.strip().strip("/")
        if not collection:
            raise ValueError("collection must be non-empty")
        return collection

    @classmethod
    def id_equals(cls, collection: str, doc_id: Hashable) -> DocumentQuery:
        """Query matching the single document *doc_id*."""
        return cls(collection=collection, where=IdFilter(op=IdOperator.EQUAL, ids=(str(doc_id),)))

    @classmethod
    def id_in(
        cls,
        collection: str,
        doc_ids: Sequence[Hashable],
        *,
        limit: int = ARRAY_QUERIES_ITEM_LIMIT,
    ) -> DocumentQuery:
        """Query matching any of *doc_ids*, returning at most *limit* documents.

        Raises :class:`ChunkSizeError` when more than *limit* ids are given;
        the list is never truncated.
        """
        if limit <= 0:
            raise DocRepoQueryError(f"limit must be positive, got {limit}")
        if len(doc_ids) > limit:
            raise ChunkSizeError(len(doc_ids), limit)
        if not doc_ids:
            raise DocRepoQueryError("id_in requires at least one id")
        return cls(
            collection=collection,
            where=IdFilter(op=IdOperator.IN, ids=tuple(str(doc_id) for doc_id in doc_ids)),
            limit=limit,
        )

    @property
    def ids(self) -> tuple[str, ...]:
        return self.where.ids

    def cache_key(self) -> str:
        """Stable key for result caching; equal queries yield equal keys."""
        limit = "" if self.limit is None else str(self.limit)
        return f"{self.collection}|{self.where.op}|{','.join(self.where.ids)}|{limit}"

    def to_structured_query(self, documents_root: str) -> dict[str, Any]:
        """Render as a REST ``structuredQuery`` object.

        Document ids are compared as reference values, so *documents_root*
        (``projects/<p>/databases/<d>/documents``) is needed to build them.
        """

        def _reference(doc_id: str) -> dict[str, str]:
            return {"referenceValue": f"{documents_root}/{self.collection}/{doc_id}"}

        if self.where.op is IdOperator.EQUAL:
            value: dict[str, Any] = _reference(self.where.ids[0])
        else:
            value = {"arrayValue": {"values": [_reference(doc_id) for doc_id in self.where.ids]}}

        structured: dict[str, Any] = {
            "from": [{"collectionId": self.collection}],
            "where": {
                "fieldFilter": {
                    "field": {"fieldPath": DOCUMENT_ID_FIELD},
                    "op": self.where.op.value,
                    "value": value,
                }
            },
        }
        if self.limit is not None:
            structured["limit"] = self.limit
        return structured
