"""Realtime change feed protocols."""

from collections.abc import AsyncIterator
from typing import Protocol
from uuid import UUID

from domain.entities.change_event import ChangeEvent


class IChangeSubscription(Protocol):
    """A live stream of change events for one table."""

    def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        ...

    def close(self) -> None:
        """Stop delivery; pending iteration ends."""
        ...


class IChangeFeed(Protocol):
    """Publish/subscribe interface for row-level change events."""

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every matching subscriber."""
        ...

    def subscribe(self, table: str, user_id: UUID) -> IChangeSubscription:
        """Subscribe to events on rows the user owns or is shared on."""
        ...
