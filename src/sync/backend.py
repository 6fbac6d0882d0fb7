"""The backend a sync session reads from and writes to.

``SyncBackend`` is everything a session needs from the service side, already
bound to the signed-in user. ``ServiceBackend`` provides it in-process on top
of the domain services and the change hub; a remote implementation would speak
the HTTP and WebSocket API instead.
"""

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, Protocol
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import BackendUnavailableError
from domain.entities.folder import Folder
from domain.entities.permission import ShareLevel
from domain.entities.preferences import TodoOrder
from domain.entities.todo import Todo
from domain.repositories.change_feed import IChangeFeed, IChangeSubscription
from domain.services.folder_service import FolderService
from domain.services.preference_service import PreferenceService
from domain.services.todo_service import TodoService

logger = structlog.get_logger()


class SyncBackend(Protocol):
    """Row store, preference store and change feed for one user.

    Every method raises ``AppException`` on failure.
    """

    async def fetch_owned_todos(self) -> list[Todo]: ...

    async def fetch_shared_todos(self) -> list[Todo]: ...

    async def fetch_owned_folders(self) -> list[Folder]: ...

    async def fetch_shared_folders(self) -> list[Folder]: ...

    async def create_todo(
        self, title: str, description: str | None = None, folder_id: UUID | None = None
    ) -> Todo: ...

    async def update_todo(self, todo_id: UUID, values: Mapping[str, Any]) -> Todo: ...

    async def update_todos(self, todo_ids: list[UUID], values: Mapping[str, Any]) -> list[Todo]: ...

    async def delete_todos(self, todo_ids: list[UUID]) -> list[UUID]: ...

    async def create_folder(self, name: str, description: str | None = None) -> Folder: ...

    async def update_folder(
        self, folder_id: UUID, name: str | None = None, description: str | None = None
    ) -> Folder: ...

    async def delete_folder(self, folder_id: UUID) -> list[UUID]: ...

    async def share_folder(
        self, folder_id: UUID, target_user_id: UUID, level: ShareLevel
    ) -> Folder: ...

    async def get_todo_order(self) -> TodoOrder: ...

    async def save_todo_order(self, order: TodoOrder) -> TodoOrder: ...

    def subscribe(self, table: str) -> IChangeSubscription: ...


@asynccontextmanager
async def _database_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("backend_operation_failed", operation=operation, error=str(exc))
        raise BackendUnavailableError(operation) from exc


class ServiceBackend:
    """In-process SyncBackend over the domain services."""

    def __init__(
        self,
        user_id: UUID,
        todo_service: TodoService,
        folder_service: FolderService,
        preference_service: PreferenceService,
        change_feed: IChangeFeed,
    ) -> None:
        self.user_id = user_id
        self._todos = todo_service
        self._folders = folder_service
        self._preferences = preference_service
        self._feed = change_feed

    async def fetch_owned_todos(self) -> list[Todo]:
        async with _database_errors("fetch_owned_todos"):
            return await self._todos.get_owned(self.user_id)

    async def fetch_shared_todos(self) -> list[Todo]:
        async with _database_errors("fetch_shared_todos"):
            return await self._todos.get_shared(self.user_id)

    async def fetch_owned_folders(self) -> list[Folder]:
        async with _database_errors("fetch_owned_folders"):
            return await self._folders.get_owned(self.user_id)

    async def fetch_shared_folders(self) -> list[Folder]:
        async with _database_errors("fetch_shared_folders"):
            return await self._folders.get_shared(self.user_id)

    async def create_todo(
        self, title: str, description: str | None = None, folder_id: UUID | None = None
    ) -> Todo:
        async with _database_errors("create_todo"):
            return await self._todos.create(self.user_id, title, description, folder_id)

    async def update_todo(self, todo_id: UUID, values: Mapping[str, Any]) -> Todo:
        async with _database_errors("update_todo"):
            return await self._todos.update(todo_id, self.user_id, **values)

    async def update_todos(self, todo_ids: list[UUID], values: Mapping[str, Any]) -> list[Todo]:
        async with _database_errors("update_todos"):
            return await self._todos.bulk_update(todo_ids, self.user_id, **values)

    async def delete_todos(self, todo_ids: list[UUID]) -> list[UUID]:
        async with _database_errors("delete_todos"):
            return await self._todos.bulk_delete(todo_ids, self.user_id)

    async def create_folder(self, name: str, description: str | None = None) -> Folder:
        async with _database_errors("create_folder"):
            return await self._folders.create(self.user_id, name, description)

    async def update_folder(
        self, folder_id: UUID, name: str | None = None, description: str | None = None
    ) -> Folder:
        async with _database_errors("update_folder"):
            return await self._folders.update(folder_id, self.user_id, name, description)

    async def delete_folder(self, folder_id: UUID) -> list[UUID]:
        async with _database_errors("delete_folder"):
            return await self._folders.delete(folder_id, self.user_id)

    async def share_folder(
        self, folder_id: UUID, target_user_id: UUID, level: ShareLevel
    ) -> Folder:
        async with _database_errors("share_folder"):
            return await self._folders.share(folder_id, self.user_id, target_user_id, level)

    async def get_todo_order(self) -> TodoOrder:
        async with _database_errors("get_todo_order"):
            return await self._preferences.get_todo_order(self.user_id)

    async def save_todo_order(self, order: TodoOrder) -> TodoOrder:
        async with _database_errors("save_todo_order"):
            return await self._preferences.save_todo_order(self.user_id, order)

    def subscribe(self, table: str) -> IChangeSubscription:
        return self._feed.subscribe(table, self.user_id)
