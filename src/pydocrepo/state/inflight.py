"""Registry of in-progress fetches, keyed by model id.

Lets concurrent reads of the same uncached id share one remote query:
the first caller claims the id and resolves it, later callers await the
claimed future.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable, Iterable
from typing import Generic, TypeVar

IdT = TypeVar("IdT", bound=Hashable)
ModelT = TypeVar("ModelT")


def _consume_exception(future: asyncio.Future[object]) -> None:
    # Nobody may be waiting; mark the exception retrieved so asyncio does
    # not log "Future exception was never retrieved".
    if not future.cancelled():
        future.exception()


class InflightFetches(Generic[IdT, ModelT]):
    def __init__(self) -> None:
        self._pending: dict[IdT, asyncio.Future[ModelT | None]] = {}

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def claim(self, model_ids: Iterable[IdT]) -> tuple[list[IdT], dict[IdT, asyncio.Future[ModelT | None]]]:
        """Split *model_ids* into ids the caller now owns and ids already in flight.

        The caller must settle every owned id with :meth:`resolve`,
        :meth:`fail` or :meth:`cancel`.
        """
        loop = asyncio.get_running_loop()
        owned: list[IdT] = []
        waiting: dict[IdT, asyncio.Future[ModelT | None]] = {}
        for model_id in model_ids:
            future = self._pending.get(model_id)
            if future is not None:
                waiting[model_id] = future
                continue
            future = loop.create_future()
            future.add_done_callback(_consume_exception)
            self._pending[model_id] = future
            owned.append(model_id)
        return owned, waiting

    def resolve(self, model_id: IdT, model: ModelT | None) -> None:
        future = self._pending.pop(model_id, None)
        if future is not None and not future.done():
            future.set_result(model)

    def fail(self, model_ids: Iterable[IdT], exc: BaseException) -> None:
        for model_id in model_ids:
            future = self._pending.pop(model_id, None)
            if future is not None and not future.done():
                future.set_exception(exc)

    def cancel(self, model_ids: Iterable[IdT]) -> None:
        for model_id in model_ids:
            future = self._pending.pop(model_id, None)
            if future is not None:
                future.cancel()
