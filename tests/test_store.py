from __future__ import annotations

from pydocrepo.models import RepoModel
from pydocrepo.state.store import ModelStore


class Item(RepoModel):
    value: int = 0


def test_get_missing_returns_none() -> None:
    store: ModelStore[str, Item] = ModelStore()
    assert store.get("nope") is None
    assert "nope" not in store


def test_put_last_write_wins_within_one_call() -> None:
    store: ModelStore[str, Item] = ModelStore()
    store.put([Item(id="a", value=1), Item(id="a", value=2)])

    stored = store.get("a")
    assert stored is not None
    assert stored.value == 2
    assert len(store) == 1


def test_put_replaces_wholesale() -> None:
    store: ModelStore[str, Item] = ModelStore()
    first = Item(id="a", value=1)
    second = Item(id="a", value=5)
    store.put([first])
    store.put([second])

    assert store.get("a") is second


def test_put_is_idempotent() -> None:
    models = [Item(id="a", value=1), Item(id="b", value=2)]
    once: ModelStore[str, Item] = ModelStore()
    twice: ModelStore[str, Item] = ModelStore()

    once.put(models)
    twice.put(models)
    twice.put(models)

    assert once.snapshot() == twice.snapshot()


def test_remove_ignores_unknown_ids() -> None:
    store: ModelStore[str, Item] = ModelStore()
    store.put([Item(id="a"), Item(id="b")])

    store.remove(["a", "zzz"])

    assert store.ids() == ["b"]


def test_snapshot_is_a_copy() -> None:
    store: ModelStore[str, Item] = ModelStore()
    store.put([Item(id="a")])

    snap = store.snapshot()
    store.clear()

    assert list(snap) == ["a"]
    assert len(store) == 0
    assert list(store) == []
