"""Manual todo ordering, filtering and debounced order persistence."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from enum import StrEnum
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import AppException
from domain.entities.preferences import TodoOrder
from domain.entities.todo import Todo
from sync.backend import SyncBackend

logger = structlog.get_logger()


class TodoFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


def sort_by_order(todos: Iterable[Todo], order: Sequence[str]) -> list[Todo]:
    """Sort todos by their position in ``order``.

    Ids missing from ``order`` go after every listed id and keep their input
    order among themselves.
    """
    index: dict[str, int] = {}
    for position, todo_id in enumerate(order):
        index.setdefault(str(todo_id), position)
    unlisted = len(index)
    return sorted(todos, key=lambda t: index.get(str(t.id), unlisted))


def filter_todos(
    todos: Iterable[Todo],
    folder_id: UUID | None = None,
    status: TodoFilter = TodoFilter.ACTIVE,
) -> list[Todo]:
    """Narrow todos to one folder (None means every folder) and a status."""
    result = []
    for todo in todos:
        if folder_id is not None and todo.folder_id != folder_id:
            continue
        if status is TodoFilter.ACTIVE and todo.is_complete:
            continue
        if status is TodoFilter.COMPLETED and not todo.is_complete:
            continue
        result.append(todo)
    return result


class Debouncer:
    """Collapse bursts of ``schedule()`` calls into one callback run.

    The callback is invoked ``delay`` seconds after the last call. A callback
    already running is never cancelled by a new schedule.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self._delay = delay
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def flush(self) -> None:
        """Run a pending callback now and wait for every started run."""
        if self._timer is not None:
            self.cancel()
            await self._callback()
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    def _fire(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._callback())
        self._running.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task[None]) -> None:
        self._running.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("debounced_run_failed", exc_info=task.exception())


class TodoOrderBook:
    """The user's ``todoOrder`` map and its debounced persistence.

    One debouncer covers every scope, and the save reads the map as it is
    when the timer fires, so reorders in different scopes in quick
    succession produce a single write that carries all of them.
    """

    def __init__(self, backend: SyncBackend, delay: float | None = None) -> None:
        self._backend = backend
        self._order: TodoOrder = {}
        self._debouncer = Debouncer(
            settings.todo_order_debounce_seconds if delay is None else delay,
            self._save,
        )

    @property
    def order(self) -> TodoOrder:
        return {scope: list(ids) for scope, ids in self._order.items()}

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    async def load(self) -> None:
        """Load the stored map; a read failure leaves it empty."""
        try:
            self._order = await self._backend.get_todo_order()
        except AppException as exc:
            logger.error("todo_order_load_failed", error_code=exc.error_code.value)
            self._order = {}

    def scope(self, scope: str) -> list[str]:
        return list(self._order.get(scope, []))

    def set_scope(self, scope: str, ids: Iterable[UUID | str]) -> None:
        """Replace one scope's order and schedule a save."""
        self._order[scope] = [str(i) for i in ids]
        self._debouncer.schedule()

    def sort(self, todos: Iterable[Todo], scope: str) -> list[Todo]:
        return sort_by_order(todos, self._order.get(scope, []))

    async def flush(self) -> None:
        await self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    async def _save(self) -> None:
        if not self._order:
            return
        try:
            await self._backend.save_todo_order(self.order)
        except AppException as exc:
            logger.error("todo_order_save_failed", error_code=exc.error_code.value)
