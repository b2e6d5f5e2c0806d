"""Multi-subscriber broadcast of repository updates."""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydocrepo.models.update import RepoUpdate

_logger = logging.getLogger(__name__)

IdT = TypeVar("IdT", bound=Hashable)

Listener = Callable[[list[RepoUpdate[Any]]], Awaitable[None] | None]

_subscription_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class Subscription:
    """Handle returned by :meth:`UpdateBroadcaster.subscribe`."""

    key: int


class UpdateBroadcaster(Generic[IdT]):
    """Deliver update batches to every subscribed listener.

    Delivery is fire-and-forget: listeners run in registration order, a
    failing listener is logged and skipped, and a listener returning an
    awaitable is scheduled as a task rather than awaited.
    """

    def __init__(self) -> None:
        self._listeners: dict[Subscription, Listener] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def subscribe(self, listener: Listener) -> Subscription:
        subscription = Subscription(next(_subscription_ids))
        self._listeners[subscription] = listener
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a listener. Unknown or already removed handles are ignored."""
        self._listeners.pop(subscription, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, updates: Sequence[RepoUpdate[IdT]]) -> None:
        """Call every listener with *updates*, including an empty batch.

        Each listener gets its own copy of the list; records are frozen.
        """
        batch = tuple(updates)
        # Snapshot so listeners may (un)subscribe while being called.
        for subscription, listener in list(self._listeners.items()):
            try:
                result = listener(list(batch))
            except Exception:
                _logger.warning("Repository listener %s failed", subscription.key, exc_info=True)
                continue
            if inspect.isawaitable(result):
                self._schedule(subscription, result)

    def _schedule(self, subscription: Subscription, awaitable: Awaitable[None]) -> None:
        async def _run() -> None:
            try:
                await awaitable
            except Exception:
                _logger.warning("Async repository listener %s failed", subscription.key, exc_info=True)

        try:
            task = asyncio.get_running_loop().create_task(_run())
        except RuntimeError:
            _logger.warning(
                "Async repository listener %s published outside a running event loop; dropped",
                subscription.key,
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait until every scheduled async listener call has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
