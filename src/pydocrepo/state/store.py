"""In-memory identifier-to-model store.

This is the only component that holds cached models for a repository.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from typing import Generic, TypeVar

from pydocrepo.models._base import HasId

IdT = TypeVar("IdT", bound=Hashable)
ModelT = TypeVar("ModelT", bound=HasId)


class ModelStore(Generic[IdT, ModelT]):
    """Mapping from model id to the latest known model.

    A model present in the store is the most recently fetched or written
    representation known to this process. Absence means "not cached", not
    "does not exist remotely". Entries are replaced wholesale, never merged,
    and are only removed by :meth:`remove` or :meth:`clear`.

    The store is not locked. Every method is synchronous, so under asyncio
    each call completes without interleaving with other tasks. It must not
    be shared across OS threads.
    """

    def __init__(self) -> None:
        self._models: dict[IdT, ModelT] = {}

    def get(self, model_id: IdT) -> ModelT | None:
        return self._models.get(model_id)

    def put(self, models: Iterable[ModelT]) -> None:
        """Insert or overwrite each model by its id. Last write wins."""
        for model in models:
            self._models[model.id] = model

    def remove(self, model_ids: Iterable[IdT]) -> None:
        """Delete the given ids. Unknown ids are ignored."""
        for model_id in model_ids:
            self._models.pop(model_id, None)

    def clear(self) -> None:
        self._models.clear()

    def ids(self) -> list[IdT]:
        return list(self._models)

    def snapshot(self) -> dict[IdT, ModelT]:
        """Shallow copy of the current mapping."""
        return dict(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[IdT]:
        return iter(list(self._models))
