# src/todolist/tasks/live_query.py

from __future__ import annotations

"""
Live query subscriptions.

A QuerySubscription is the consumer end of a live query: a stream of result
snapshots that lives on the asyncio event loop. The TaskDatabase pushes a fresh
snapshot after every commit that can change the result.

Consumption:
- `async for snapshot in sub: ...`
- `await sub.next()`
- `await sub.first()` (one-shot read: first snapshot, then detach)

Threading:
- _push/_fail are scheduled onto the loop with call_soon_threadsafe
- close() must be called from the loop thread; it never blocks
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..errors import StorageUnavailable, TodoError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WAKE: Any = object()


class SubscriptionClosed(TodoError):
    """The subscription was detached before it produced the requested snapshot."""


@dataclass(slots=True, frozen=True)
class _Failure:
    exc: StorageUnavailable


class QuerySubscription(Generic[T]):
    def __init__(self, name: str, *, on_detach: Callable[[QuerySubscription[Any]], None]) -> None:
        self.name = name
        self._on_detach = on_detach
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

        # No more snapshots are accepted (closed by the consumer or failed).
        self._terminated = False
        # Nothing more will be handed to the consumer.
        self._closed = False

    def __repr__(self) -> str:
        return f"QuerySubscription({self.name!r}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def detached(self) -> bool:
        return self._terminated

    # ---- producer side (event loop thread) ----

    def _push(self, snapshot: T) -> None:
        if self._terminated:
            return
        self._queue.put_nowait(snapshot)

    def _fail(self, exc: StorageUnavailable) -> None:
        if self._terminated:
            return
        self._terminated = True
        self._on_detach(self)
        self._queue.put_nowait(_Failure(exc))
        logger.debug("Subscription %s failed: %s", self.name, exc)

    # ---- consumer side ----

    def close(self) -> None:
        """Detach. Idempotent; pending snapshots are dropped."""
        if self._closed:
            return
        self._closed = True
        if not self._terminated:
            self._terminated = True
            self._on_detach(self)
        self._queue.put_nowait(_WAKE)
        logger.debug("Subscription %s closed", self.name)

    def __aiter__(self) -> QuerySubscription[T]:
        return self

    async def __anext__(self) -> T:
        while not self._closed:
            item = await self._queue.get()
            if item is _WAKE:
                continue
            if isinstance(item, _Failure):
                # Delivered exactly once; the stream ends afterwards.
                self._closed = True
                raise item.exc
            return item
        raise StopAsyncIteration

    async def next(self) -> T:
        try:
            return await self.__anext__()
        except StopAsyncIteration:
            raise SubscriptionClosed(f"{self.name} is closed") from None

    async def first(self) -> T:
        try:
            return await self.next()
        finally:
            self.close()
