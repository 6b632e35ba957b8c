"""In-memory change feed: one notification per committed document write.

Observer pattern over the league collections. The store publishes after each
commit; live readers (the SSE endpoint) subscribe to a collection, or to all
of them, and re-read whatever they render. Notifications carry ids, not
document bodies, so a subscriber always reads committed state.

A subscriber that falls behind loses notifications rather than blocking the
writer.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import Any, Literal

logger = logging.getLogger(__name__)

Collection = Literal["players", "tournaments", "accounts"]
COLLECTIONS: frozenset[str] = frozenset({"players", "tournaments", "accounts"})

Change = dict[str, Any]


class ChangeFeed:
    """Async pub/sub for document changes.

    Usage:
        feed = ChangeFeed()

        async with feed.subscribe("players") as sub:
            change = await sub.get(timeout=15)

        await feed.publish("players", "upsert", "p-1")
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[Change]]] = defaultdict(list)
        self._all_subscribers: list[asyncio.Queue[Change]] = []
        self.published = 0

    async def publish(self, collection: str, op: str, doc_id: str) -> int:
        """Notify subscribers of *collection* and catch-all subscribers.

        Returns the number of subscribers that received the change.
        """
        change: Change = {"collection": collection, "op": op, "id": doc_id}
        self.published += 1
        delivered = 0
        for queue in [*self._subscribers.get(collection, []), *self._all_subscribers]:
            try:
                queue.put_nowait(change)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("change_feed_dropped collection=%s id=%s", collection, doc_id)
        return delivered

    def subscribe(self, collection: str | None = None, max_size: int = 100) -> Subscription:
        """Subscribe to one collection, or to every collection when None."""
        if collection is not None and collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection {collection!r}")
        queue: asyncio.Queue[Change] = asyncio.Queue(maxsize=max_size)
        return Subscription(self, queue, collection)

    def _register(self, queue: asyncio.Queue[Change], collection: str | None) -> None:
        if collection is None:
            self._all_subscribers.append(queue)
        else:
            self._subscribers[collection].append(queue)

    def _unregister(self, queue: asyncio.Queue[Change], collection: str | None) -> None:
        with contextlib.suppress(ValueError):
            if collection is None:
                self._all_subscribers.remove(queue)
            else:
                self._subscribers[collection].remove(queue)

    @property
    def subscriber_count(self) -> int:
        typed = sum(len(subs) for subs in self._subscribers.values())
        return typed + len(self._all_subscribers)


class Subscription:
    """Active subscription. Use as async context manager, then iterate or ``get``."""

    def __init__(
        self,
        feed: ChangeFeed,
        queue: asyncio.Queue[Change],
        collection: str | None,
    ) -> None:
        self._feed = feed
        self._queue = queue
        self._collection = collection
        self._active = False

    async def __aenter__(self) -> Subscription:
        self._feed._register(self._queue, self._collection)
        self._active = True
        return self

    async def __aexit__(self, *args: object) -> None:
        self._active = False
        self._feed._unregister(self._queue, self._collection)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Change:
        if not self._active:
            raise StopAsyncIteration
        try:
            return await self._queue.get()
        except asyncio.CancelledError:
            raise StopAsyncIteration from None

    async def get(self, timeout: float | None = None) -> Change | None:
        """Next change, or None if nothing arrives within *timeout* seconds."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None

    def drain(self) -> list[Change]:
        """Return every change already queued without waiting."""
        changes: list[Change] = []
        while True:
            try:
                changes.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return changes
