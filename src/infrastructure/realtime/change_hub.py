"""In-process realtime change feed.

Each subscriber owns a bounded asyncio queue. ``publish`` never awaits: events
are put with ``put_nowait`` and a subscriber whose queue is full misses the
event rather than stalling the writer.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Union
from uuid import UUID

import structlog

from core.config import settings
from domain.entities.change_event import TABLES, ChangeEvent

logger = structlog.get_logger()

_CLOSED = object()


class Subscription:
    """One subscriber's view of a table's change events."""

    def __init__(self, hub: "ChangeHub", table: str, user_id: UUID, maxsize: int) -> None:
        self.table = table
        self.user_id = user_id
        self._hub = hub
        self._queue: asyncio.Queue[Union[ChangeEvent, object]] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def wants(self, event: ChangeEvent) -> bool:
        return event.table == self.table and event.visible_to(self.user_id)

    def offer(self, event: ChangeEvent) -> bool:
        """Queue an event; False when the subscriber is closed or saturated."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "realtime_event_dropped",
                table=self.table,
                user_id=str(self.user_id),
                entity_id=str(event.entity_id),
            )
            return False
        return True

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        """Detach from the hub; iteration ends after queued events are drained."""
        if self._closed:
            return
        self._closed = True
        self._hub._detach(self)
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # Make room for the sentinel; the subscriber is going away anyway
            self._queue.get_nowait()
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ChangeEvent]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            assert isinstance(item, ChangeEvent)
            yield item


class ChangeHub:
    """Fan change events out to subscribers by table and visibility."""

    def __init__(self, queue_size: int | None = None) -> None:
        self._queue_size = queue_size or settings.realtime_queue_size
        self._subscriptions: list[Subscription] = []

    def subscribe(self, table: str, user_id: UUID) -> Subscription:
        """Subscribe to events on rows of ``table`` the user owns or is shared on."""
        if table not in TABLES:
            raise ValueError(f"Unknown realtime table: {table}")
        subscription = Subscription(self, table, user_id, self._queue_size)
        self._subscriptions.append(subscription)
        logger.debug("realtime_subscribed", table=table, user_id=str(user_id))
        return subscription

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every matching subscriber."""
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.wants(event) and subscription.offer(event):
                delivered += 1
        logger.debug(
            "realtime_event_published",
            table=event.table,
            type=event.type.value,
            entity_id=str(event.entity_id),
            delivered=delivered,
        )

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _detach(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
