from __future__ import annotations

import pytest
from pydantic import ValidationError

from pydocrepo.exceptions import ChunkSizeError, DocRepoQueryError
from pydocrepo.query import DocumentQuery, IdOperator

_ROOT = "projects/demo/databases/(default)/documents"


def test_id_equals_structured_query() -> None:
    query = DocumentQuery.id_equals("users", "alice")

    assert query.to_structured_query(_ROOT) == {
        "from": [{"collectionId": "users"}],
        "where": {
            "fieldFilter": {
                "field": {"fieldPath": "__name__"},
                "op": "EQUAL",
                "value": {"referenceValue": f"{_ROOT}/users/alice"},
            }
        },
    }


def test_id_in_structured_query_carries_limit() -> None:
    query = DocumentQuery.id_in("users", ["a", "b"], limit=2)

    structured = query.to_structured_query(_ROOT)

    assert structured["limit"] == 2
    field_filter = structured["where"]["fieldFilter"]
    assert field_filter["op"] == "IN"
    assert field_filter["value"] == {
        "arrayValue": {
            "values": [
                {"referenceValue": f"{_ROOT}/users/a"},
                {"referenceValue": f"{_ROOT}/users/b"},
            ]
        }
    }


def test_id_in_rejects_oversized_list() -> None:
    with pytest.raises(ChunkSizeError) as excinfo:
        DocumentQuery.id_in("users", ["a", "b", "c"], limit=2)
    assert excinfo.value.size == 3
    assert excinfo.value.limit == 2


def test_id_in_rejects_empty_list() -> None:
    with pytest.raises(DocRepoQueryError):
        DocumentQuery.id_in("users", [])


def test_non_string_ids_are_rendered_as_strings() -> None:
    query = DocumentQuery.id_in("counters", [1, 2])
    assert query.ids == ("1", "2")
    assert query.where.op is IdOperator.IN


def test_collection_is_normalized_and_required() -> None:
    assert DocumentQuery.id_equals(" /users/ ", "a").collection == "users"
    with pytest.raises(ValidationError):
        DocumentQuery.id_equals("  ", "a")


def test_cache_key_distinguishes_queries() -> None:
    assert DocumentQuery.id_equals("users", "a").cache_key() == DocumentQuery.id_equals("users", "a").cache_key()
    assert DocumentQuery.id_equals("users", "a").cache_key() != DocumentQuery.id_in("users", ["a"]).cache_key()
