"""A signed-in user's live view of their todos and folders.

``TodoSession`` composes the entity store, the optimistic mutation pipeline,
the realtime merge layer and the order book. Every operation catches
``AppException`` at its boundary and reports the outcome through the
notifier; none of them raise for backend failures.

Creates, deletes and folder operations are confirm-then-apply: the store only
changes once the backend has accepted the write. Field edits and moves are
optimistic and rolled back on failure.
"""

import dataclasses
from collections.abc import Sequence
from types import TracebackType
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import AppException
from domain.entities.folder import Folder
from domain.entities.permission import Permission, ShareLevel, Shareable, resolve_permission
from domain.entities.preferences import scope_key
from domain.entities.todo import Todo
from sync.backend import SyncBackend
from sync.entity_store import EntityStore
from sync.mutations import OptimisticMutationPipeline
from sync.notifier import Notifier
from sync.ordering import TodoFilter, TodoOrderBook, filter_todos
from sync.realtime import RealtimeMergeLayer

logger = structlog.get_logger()


class TodoSession:
    """Per-user sync session."""

    def __init__(
        self,
        user_id: UUID,
        backend: SyncBackend,
        notifier: Notifier | None = None,
        order_delay: float | None = None,
    ) -> None:
        self.user_id = user_id
        self.backend = backend
        self.notifier = notifier or Notifier()
        self.store = EntityStore()
        self.order = TodoOrderBook(backend, delay=order_delay)
        self._pipeline = OptimisticMutationPipeline(self.notifier)
        self._realtime = RealtimeMergeLayer(self.store, backend, self.notifier)

    async def __aenter__(self) -> "TodoSession":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def start(self) -> None:
        """Subscribe to the change feed, then load todos, folders and order."""
        self._realtime.start()
        await self._realtime.load()
        await self.order.load()
        logger.info(
            "session_started",
            user_id=str(self.user_id),
            todos=len(self.store.todos),
            folders=len(self.store.folders),
        )

    async def close(self) -> None:
        """Stop the change feed and write out a pending order save."""
        try:
            await self._realtime.stop()
        finally:
            await self.order.flush()
        logger.info("session_closed", user_id=str(self.user_id))

    async def refresh(self) -> None:
        await self._realtime.load()

    @property
    def todos(self) -> list[Todo]:
        return self.store.todos.items()

    @property
    def folders(self) -> list[Folder]:
        return self.store.folders.items()

    def permission_for(self, entity: Shareable) -> Permission:
        return resolve_permission(entity, self.user_id)

    def visible_todos(
        self, folder_id: UUID | None = None, status: TodoFilter = TodoFilter.ACTIVE
    ) -> list[Todo]:
        """Todos for one folder view, filtered and in manual order."""
        todos = filter_todos(self.store.todos.items(), folder_id, status)
        return self.order.sort(todos, scope_key(folder_id))

    # --- Todos ---

    async def add_todo(
        self, title: str, description: str | None = None, folder_id: UUID | None = None
    ) -> Todo | None:
        try:
            todo = await self.backend.create_todo(title, description, folder_id)
        except AppException:
            self.notifier.error("Failed to add todo")
            return None
        self.store.todos.upsert(todo)
        self.notifier.success("Todo added successfully!")
        return todo

    async def toggle_todo(self, todo_id: UUID) -> bool:
        todo = self.store.todos.get(todo_id)
        if todo is None:
            return False
        values = {"is_complete": not todo.is_complete}
        return await self._pipeline.run(
            self.store.todos,
            [todo_id],
            values,
            lambda: self.backend.update_todo(todo_id, values),
            failure_message="Failed to update todo",
        )

    async def update_todo(
        self, todo_id: UUID, title: str | None = None, description: str | None = None
    ) -> bool:
        values: dict[str, Any] = {}
        if title is not None:
            values["title"] = title
        if description is not None:
            values["description"] = description
        if not values:
            return False
        return await self._pipeline.run(
            self.store.todos,
            [todo_id],
            values,
            lambda: self.backend.update_todo(todo_id, values),
            failure_message="Failed to update todo",
            success_message="Todo updated successfully!",
        )

    async def delete_todo(self, todo_id: UUID) -> bool:
        try:
            await self.backend.delete_todos([todo_id])
        except AppException:
            self.notifier.error("Failed to delete todo")
            return False
        self.store.todos.remove(todo_id)
        self.notifier.success("Todo deleted successfully!")
        return True

    async def bulk_move(self, todo_ids: Sequence[UUID], folder_id: UUID | None) -> bool:
        ids = list(todo_ids)
        values = {"folder_id": folder_id}
        return await self._pipeline.run(
            self.store.todos,
            ids,
            values,
            lambda: self.backend.update_todos(ids, values),
            failure_message="Failed to move todos",
            success_message="Todos moved successfully!",
        )

    async def bulk_set_complete(self, todo_ids: Sequence[UUID], is_complete: bool) -> bool:
        ids = list(todo_ids)
        values = {"is_complete": is_complete}
        return await self._pipeline.run(
            self.store.todos,
            ids,
            values,
            lambda: self.backend.update_todos(ids, values),
            failure_message="Failed to update todos",
            success_message="Todos updated successfully!",
        )

    async def bulk_delete(self, todo_ids: Sequence[UUID]) -> bool:
        try:
            deleted = await self.backend.delete_todos(list(todo_ids))
        except AppException:
            self.notifier.error("Failed to delete todos")
            return False
        for todo_id in deleted:
            self.store.todos.remove(todo_id)
        self.notifier.success("Todos deleted successfully!")
        return True

    async def move_todo(self, dragged_id: UUID, target_id: UUID, visible: Sequence[Todo]) -> bool:
        """Drop ``dragged_id`` onto ``target_id`` within the displayed list.

        A drop across folders first moves the todo into the target's folder.
        The resulting order of the target's scope is then stored.
        """
        if dragged_id == target_id:
            return False
        positions = [t.id for t in visible]
        if dragged_id not in positions or target_id not in positions:
            return False
        dragged = self.store.todos.get(dragged_id)
        target = self.store.todos.get(target_id)
        if dragged is None or target is None:
            return False

        if dragged.folder_id != target.folder_id:
            values = {"folder_id": target.folder_id}
            moved = await self._pipeline.run(
                self.store.todos,
                [dragged_id],
                values,
                lambda: self.backend.update_todo(dragged_id, values),
                failure_message="Failed to move todo",
            )
            if not moved:
                return False
            dragged = dataclasses.replace(dragged, folder_id=target.folder_id)

        reordered = [t for t in visible if t.id != dragged_id]
        reordered.insert(positions.index(target_id), dragged)
        scope = scope_key(target.folder_id)
        self.order.set_scope(scope, [t.id for t in reordered if scope_key(t.folder_id) == scope])
        self.notifier.success("Todo moved successfully!")
        return True

    # --- Folders ---

    async def create_folder(self, name: str, description: str | None = None) -> Folder | None:
        try:
            folder = await self.backend.create_folder(name, description)
        except AppException:
            self.notifier.error("Failed to create folder")
            return None
        self.store.folders.upsert(folder)
        self.notifier.success("Folder created successfully!")
        return folder

    async def update_folder(
        self, folder_id: UUID, name: str | None = None, description: str | None = None
    ) -> Folder | None:
        try:
            folder = await self.backend.update_folder(folder_id, name, description)
        except AppException:
            self.notifier.error("Failed to update folder")
            return None
        self.store.folders.upsert(folder)
        self.notifier.success("Folder updated successfully!")
        return folder

    async def delete_folder(self, folder_id: UUID) -> bool:
        try:
            await self.backend.delete_folder(folder_id)
        except AppException:
            self.notifier.error("Failed to delete folder")
            return False
        for todo in self.store.todos.items():
            if todo.folder_id == folder_id:
                self.store.todos.upsert(dataclasses.replace(todo, folder_id=None))
        self.store.folders.remove(folder_id)
        self.notifier.success("Folder deleted successfully!")
        return True

    async def share_folder(
        self, folder_id: UUID, target_user_id: UUID, level: ShareLevel | str
    ) -> Folder | None:
        try:
            folder = await self.backend.share_folder(folder_id, target_user_id, ShareLevel(level))
        except (AppException, ValueError):
            self.notifier.error("Failed to share folder")
            return None
        self.store.folders.upsert(folder)
        for todo in self.store.todos.items():
            if todo.folder_id == folder_id:
                self.store.todos.upsert(
                    dataclasses.replace(
                        todo,
                        shared_with=list(folder.shared_with),
                        can_edit=list(folder.can_edit),
                    )
                )
        self.notifier.success("Folder shared successfully!")
        return folder
