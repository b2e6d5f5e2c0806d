from __future__ import annotations

import pytest

from pydocrepo.memory import MemoryDocumentSource
from pydocrepo.query import DocumentQuery


@pytest.mark.asyncio
async def test_equal_query_returns_matching_document() -> None:
    source = MemoryDocumentSource({"users": {"a": {"name": "A"}, "b": {"name": "B"}}})

    result = await source.run_query(DocumentQuery.id_equals("users", "b"), False)

    assert result is not None
    assert [doc.id for doc in result.documents] == ["b"]
    assert result.documents[0].data == {"name": "B"}


@pytest.mark.asyncio
async def test_in_query_skips_missing_and_honours_limit() -> None:
    source = MemoryDocumentSource({"users": {doc_id: {} for doc_id in "abc"}})

    result = await source.run_query(DocumentQuery.id_in("users", ["c", "x", "a", "b"], limit=4), True)
    assert result is not None
    assert [doc.id for doc in result.documents] == ["c", "a", "b"]

    limited = await source.run_query(DocumentQuery.id_in("users", ["a", "b"], limit=2).model_copy(update={"limit": 1}), False)
    assert limited is not None
    assert len(limited) == 1
    assert source.queries[0][1] is True


@pytest.mark.asyncio
async def test_unavailable_returns_none_but_records_query() -> None:
    source = MemoryDocumentSource({"users": {"a": {}}})
    source.available = False

    assert await source.run_query(DocumentQuery.id_equals("users", "a"), False) is None
    assert source.query_count == 1


@pytest.mark.asyncio
async def test_set_and_delete_document() -> None:
    source = MemoryDocumentSource()
    created = source.set_document("users", "a", {"v": 1})
    updated = source.set_document("users", "a", {"v": 2})

    assert updated.create_time == created.create_time
    assert source.documents("users")["a"].data == {"v": 2}

    source.delete_document("users", "a")
    source.delete_document("users", "missing")
    result = await source.run_query(DocumentQuery.id_equals("users", "a"), False)
    assert result is not None
    assert result.is_empty


def test_stored_data_is_copied() -> None:
    data = {"nested": {"v": 1}}
    source = MemoryDocumentSource({"users": {"a": data}})
    data["nested"]["v"] = 99

    assert source.documents("users")["a"].data == {"nested": {"v": 1}}
