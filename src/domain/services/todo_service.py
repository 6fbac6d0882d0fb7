"""Todo service layer with business logic."""

from collections.abc import Callable, Iterable
from typing import Any, cast
from uuid import UUID

import structlog

from core.exceptions import (
    BlankFieldError,
    FolderNotFoundError,
    InsufficientPermissionsError,
    TodoNotFoundError,
)
from domain.entities.change_event import ChangeEvent
from domain.entities.folder import Folder
from domain.entities.permission import Permission, has_permission, resolve_permission
from domain.entities.todo import Todo
from domain.repositories.change_feed import IChangeFeed
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


def merge_unique(*groups: Iterable[Todo]) -> list[Todo]:
    """Concatenate groups of todos, keeping the first occurrence of each id."""
    seen: dict[UUID, Todo] = {}
    for group in groups:
        for todo in group:
            seen.setdefault(todo.id, todo)
    return list(seen.values())


class TodoService:
    """Service layer for Todo business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        change_feed: IChangeFeed | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._feed = change_feed

    async def get_owned(self, user_id: UUID) -> list[Todo]:
        """Get the todos a user owns."""
        async with self._uow_factory() as uow:
            return await uow.todos.get_owned(user_id)  # type: ignore[no-any-return]

    async def get_shared(self, user_id: UUID) -> list[Todo]:
        """Get the todos shared with a user."""
        async with self._uow_factory() as uow:
            return await uow.todos.get_shared_with(user_id)  # type: ignore[no-any-return]

    async def get_visible_for_user(self, user_id: UUID) -> list[Todo]:
        """Get owned and shared todos, de-duplicated by id (owned first)."""
        async with self._uow_factory() as uow:
            owned = await uow.todos.get_owned(user_id)
            shared = await uow.todos.get_shared_with(user_id)
            return merge_unique(owned, shared)

    async def get_by_id(self, todo_id: UUID, user_id: UUID) -> Todo:
        """Get a specific todo the user can at least view."""
        async with self._uow_factory() as uow:
            todo = await uow.todos.get(todo_id)
            if not todo or resolve_permission(todo, user_id) == Permission.NO_ACCESS:
                raise TodoNotFoundError(str(todo_id))
            return todo

    async def create(
        self,
        user_id: UUID,
        title: str,
        description: str | None = None,
        folder_id: UUID | None = None,
    ) -> Todo:
        """Create a new todo, inheriting the sharing sets of its folder."""
        if not title.strip():
            raise BlankFieldError("title")

        async with self._uow_factory() as uow:
            shared_with: list[UUID] = []
            can_edit: list[UUID] = []

            if folder_id:
                folder = await self._require_folder_edit(uow, folder_id, user_id)
                shared_with = list(folder.shared_with)
                can_edit = list(folder.can_edit)

            todo = Todo(
                user_id=user_id,
                title=title,
                description=description,
                folder_id=folder_id,
                shared_with=shared_with,
                can_edit=can_edit,
            )
            created = await uow.todos.create(todo)
            await uow.commit()

        logger.info("todo_created", todo_id=str(created.id), folder_id=str(folder_id) if folder_id else None)
        self._publish([ChangeEvent.inserted(created)])
        return created

    async def update(
        self,
        todo_id: UUID,
        user_id: UUID,
        title: str | None = None,
        description: str | None = None,
        is_complete: bool | None = None,
        folder_id: object = ...,  # Sentinel to detect explicit None
    ) -> Todo:
        """Update fields of a todo. Requires edit access."""
        if title is not None and not title.strip():
            raise BlankFieldError("title")

        async with self._uow_factory() as uow:
            todo = await uow.todos.get(todo_id)
            if not todo:
                raise TodoNotFoundError(str(todo_id))
            self._require(todo, user_id, Permission.EDIT)

            if folder_id is not ... and folder_id != todo.folder_id:
                if folder_id is not None:
                    await self._require_folder_edit(uow, cast(UUID, folder_id), user_id)
                todo.folder_id = cast(UUID | None, folder_id)

            if title is not None:
                todo.title = title
            if description is not None:
                todo.description = description
            if is_complete is not None:
                todo.is_complete = is_complete

            updated = await uow.todos.update(todo)
            await uow.commit()

        self._publish([ChangeEvent.updated(updated)])
        return updated

    async def bulk_update(
        self,
        todo_ids: list[UUID],
        user_id: UUID,
        is_complete: bool | None = None,
        folder_id: object = ...,
    ) -> list[Todo]:
        """Set completion and/or folder on many todos in one write.

        All-or-nothing: every id must exist and be editable by the user.
        """
        values: dict[str, Any] = {}
        if is_complete is not None:
            values["is_complete"] = is_complete
        if folder_id is not ...:
            values["folder_id"] = folder_id
        if not todo_ids or not values:
            return []

        async with self._uow_factory() as uow:
            todos = await self._load_all(uow, todo_ids)
            for todo in todos:
                self._require(todo, user_id, Permission.EDIT)
            if values.get("folder_id") is not None:
                await self._require_folder_edit(uow, cast(UUID, values["folder_id"]), user_id)

            updated = await uow.todos.update_many(todo_ids, values)
            await uow.commit()

        logger.info("todos_bulk_updated", count=len(updated), fields=sorted(values))
        self._publish([ChangeEvent.updated(t) for t in updated])
        return updated  # type: ignore[no-any-return]

    async def delete(self, todo_id: UUID, user_id: UUID) -> bool:
        """Delete a todo. Only the owner may delete."""
        deleted = await self.bulk_delete([todo_id], user_id)
        return bool(deleted)

    async def bulk_delete(self, todo_ids: list[UUID], user_id: UUID) -> list[UUID]:
        """Delete many todos. All-or-nothing; the user must own every one."""
        if not todo_ids:
            return []

        async with self._uow_factory() as uow:
            todos = await self._load_all(uow, todo_ids)
            for todo in todos:
                self._require(todo, user_id, Permission.OWNER)

            deleted = await uow.todos.delete_many(todo_ids)
            await uow.commit()

        logger.info("todos_deleted", count=len(deleted))
        self._publish([ChangeEvent.deleted(t) for t in deleted])
        return [t.id for t in deleted]

    async def _load_all(self, uow: IUnitOfWork, todo_ids: list[UUID]) -> list[Todo]:
        """Load every requested todo or raise for the first missing id."""
        todos = await uow.todos.get_many(todo_ids)
        found = {t.id for t in todos}
        for todo_id in todo_ids:
            if todo_id not in found:
                raise TodoNotFoundError(str(todo_id))
        return todos  # type: ignore[no-any-return]

    async def _require_folder_edit(
        self, uow: IUnitOfWork, folder_id: UUID, user_id: UUID
    ) -> Folder:
        """Verify a destination folder exists and accepts todos from the user."""
        folder = await uow.folders.get(folder_id)
        if not folder or resolve_permission(folder, user_id) == Permission.NO_ACCESS:
            raise FolderNotFoundError(str(folder_id))
        if not has_permission(resolve_permission(folder, user_id), Permission.EDIT):
            raise InsufficientPermissionsError("edit")
        return folder

    def _require(self, todo: Todo, user_id: UUID, required: Permission) -> None:
        """Verify the user holds at least ``required`` on a todo.

        Todos the user cannot see at all are reported as not found.
        """
        permission = resolve_permission(todo, user_id)
        if permission == Permission.NO_ACCESS:
            raise TodoNotFoundError(str(todo.id))
        if not has_permission(permission, required):
            raise InsufficientPermissionsError(required.name.lower())

    def _publish(self, events: list[ChangeEvent]) -> None:
        if not self._feed:
            return
        for event in events:
            self._feed.publish(event)
