"""Realtime merge layer.

Populates the entity store from the "owned" and "shared with me" queries and
folds the live change feed into it. Events are idempotent: an insert or update
for a known id replaces the entry in place, an unknown id is appended and a
delete removes the id if present.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

import structlog

from core.exceptions import AppException
from domain.entities.change_event import FOLDERS_TABLE, TODOS_TABLE, ChangeEvent, ChangeType
from domain.repositories.change_feed import IChangeSubscription
from sync.backend import SyncBackend
from sync.entity_store import EntityCollection, EntityStore, T
from sync.notifier import Notifier

logger = structlog.get_logger()


def apply_event(collection: EntityCollection[T], event: ChangeEvent) -> None:
    """Merge one change event into a collection."""
    if event.type is ChangeType.DELETE:
        collection.remove(event.entity_id)
    elif event.new is not None:
        collection.upsert(event.new)  # type: ignore[arg-type]


class RealtimeMergeLayer:
    """Keeps a session's entity store in step with the backend."""

    def __init__(self, store: EntityStore, backend: SyncBackend, notifier: Notifier) -> None:
        self._store = store
        self._backend = backend
        self._notifier = notifier
        self._subscriptions: list[IChangeSubscription] = []
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def load(self) -> None:
        """Run the initial todo and folder population."""
        await self.load_todos()
        await self.load_folders()

    async def load_todos(self) -> bool:
        return await self._load(
            self._store.todos,
            self._backend.fetch_owned_todos,
            self._backend.fetch_shared_todos,
            ("Failed to fetch todos", "Failed to fetch shared todos"),
        )

    async def load_folders(self) -> bool:
        return await self._load(
            self._store.folders,
            self._backend.fetch_owned_folders,
            self._backend.fetch_shared_folders,
            ("Failed to fetch folders", "Failed to fetch shared folders"),
        )

    def start(self) -> None:
        """Subscribe to both tables. Does not depend on the initial load."""
        if self._tasks:
            return
        for table, collection in (
            (TODOS_TABLE, self._store.todos),
            (FOLDERS_TABLE, self._store.folders),
        ):
            subscription = self._backend.subscribe(table)
            self._subscriptions.append(subscription)
            self._tasks.append(
                asyncio.create_task(self._consume(subscription, collection), name=f"realtime:{table}")
            )

    async def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.close()
        if self._tasks:
            results = await asyncio.gather(*self._tasks, return_exceptions=True)
            for task, result in zip(self._tasks, results):
                if isinstance(result, BaseException):
                    logger.error("realtime_consumer_failed", task=task.get_name(), exc_info=result)
        self._subscriptions.clear()
        self._tasks.clear()

    async def _load(
        self,
        collection: EntityCollection[T],
        fetch_owned: Callable[[], Awaitable[Sequence[T]]],
        fetch_shared: Callable[[], Awaitable[Sequence[T]]],
        failure_messages: tuple[str, str],
    ) -> bool:
        """Replace ``collection`` with owned + shared; on any failure leave it alone."""
        fetched: list[Sequence[T]] = []
        for fetch, message in zip((fetch_owned, fetch_shared), failure_messages):
            try:
                fetched.append(await fetch())
            except AppException as exc:
                logger.error("initial_fetch_failed", error_code=exc.error_code.value, message=message)
                self._notifier.error(message)
                return False

        owned, shared = fetched
        collection.replace_all([*owned, *shared])
        return True

    async def _consume(
        self, subscription: IChangeSubscription, collection: EntityCollection[T]
    ) -> None:
        async for event in subscription:
            apply_event(collection, event)
