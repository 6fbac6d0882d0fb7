"""Fixtures for the sync layer: an in-memory backend and helpers."""

import asyncio
import dataclasses
from collections.abc import Mapping
from typing import Any
from uuid import UUID, uuid4

import pytest

from core.exceptions import BackendUnavailableError, FolderNotFoundError, TodoNotFoundError
from domain.entities.folder import Folder
from domain.entities.permission import ShareLevel, grant
from domain.entities.preferences import TodoOrder
from domain.entities.todo import Todo
from infrastructure.realtime.change_hub import ChangeHub, Subscription


async def settle(rounds: int = 20) -> None:
    """Let consumer tasks drain their queues."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeBackend:
    """In-memory SyncBackend.

    Operations named in ``failing`` raise ``BackendUnavailableError``. Every
    call is recorded in ``calls`` as ``(operation, args)``.
    """

    def __init__(self, user_id: UUID, hub: ChangeHub | None = None) -> None:
        self.user_id = user_id
        self.hub = hub or ChangeHub(queue_size=100)
        self.todos: dict[UUID, Todo] = {}
        self.folders: dict[UUID, Folder] = {}
        self.order: TodoOrder = {}
        self.saved_orders: list[TodoOrder] = []
        self.failing: set[str] = set()
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def seed(self, *records: Todo | Folder) -> None:
        for record in records:
            if isinstance(record, Todo):
                self.todos[record.id] = record
            else:
                self.folders[record.id] = record

    def _check(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.failing:
            raise BackendUnavailableError(operation)

    def called(self, operation: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == operation]

    async def fetch_owned_todos(self) -> list[Todo]:
        self._check("fetch_owned_todos")
        return [t for t in self.todos.values() if t.user_id == self.user_id]

    async def fetch_shared_todos(self) -> list[Todo]:
        self._check("fetch_shared_todos")
        return [t for t in self.todos.values() if self.user_id in t.shared_with]

    async def fetch_owned_folders(self) -> list[Folder]:
        self._check("fetch_owned_folders")
        return [f for f in self.folders.values() if f.user_id == self.user_id]

    async def fetch_shared_folders(self) -> list[Folder]:
        self._check("fetch_shared_folders")
        return [f for f in self.folders.values() if self.user_id in f.shared_with]

    async def create_todo(
        self, title: str, description: str | None = None, folder_id: UUID | None = None
    ) -> Todo:
        self._check("create_todo", title, description, folder_id)
        todo = Todo(user_id=self.user_id, title=title, description=description, folder_id=folder_id)
        self.todos[todo.id] = todo
        return todo

    async def update_todo(self, todo_id: UUID, values: Mapping[str, Any]) -> Todo:
        self._check("update_todo", todo_id, dict(values))
        if todo_id not in self.todos:
            raise TodoNotFoundError(str(todo_id))
        self.todos[todo_id] = dataclasses.replace(self.todos[todo_id], **values)
        return self.todos[todo_id]

    async def update_todos(self, todo_ids: list[UUID], values: Mapping[str, Any]) -> list[Todo]:
        self._check("update_todos", list(todo_ids), dict(values))
        for todo_id in todo_ids:
            self.todos[todo_id] = dataclasses.replace(self.todos[todo_id], **values)
        return [self.todos[i] for i in todo_ids]

    async def delete_todos(self, todo_ids: list[UUID]) -> list[UUID]:
        self._check("delete_todos", list(todo_ids))
        return [i for i in todo_ids if self.todos.pop(i, None) is not None]

    async def create_folder(self, name: str, description: str | None = None) -> Folder:
        self._check("create_folder", name, description)
        folder = Folder(user_id=self.user_id, name=name, description=description)
        self.folders[folder.id] = folder
        return folder

    async def update_folder(
        self, folder_id: UUID, name: str | None = None, description: str | None = None
    ) -> Folder:
        self._check("update_folder", folder_id, name, description)
        folder = self.folders[folder_id]
        self.folders[folder_id] = dataclasses.replace(
            folder,
            name=name if name is not None else folder.name,
            description=description if description is not None else folder.description,
        )
        return self.folders[folder_id]

    async def delete_folder(self, folder_id: UUID) -> list[UUID]:
        self._check("delete_folder", folder_id)
        if self.folders.pop(folder_id, None) is None:
            raise FolderNotFoundError(str(folder_id))
        detached = [t.id for t in self.todos.values() if t.folder_id == folder_id]
        for todo_id in detached:
            self.todos[todo_id] = dataclasses.replace(self.todos[todo_id], folder_id=None)
        return detached

    async def share_folder(
        self, folder_id: UUID, target_user_id: UUID, level: ShareLevel
    ) -> Folder:
        self._check("share_folder", folder_id, target_user_id, level)
        folder = self.folders[folder_id]
        shared_with, can_edit = grant(folder.shared_with, folder.can_edit, target_user_id, level)
        self.folders[folder_id] = dataclasses.replace(
            folder, shared_with=shared_with, can_edit=can_edit
        )
        return self.folders[folder_id]

    async def get_todo_order(self) -> TodoOrder:
        self._check("get_todo_order")
        return {k: list(v) for k, v in self.order.items()}

    async def save_todo_order(self, order: TodoOrder) -> TodoOrder:
        self._check("save_todo_order", order)
        self.saved_orders.append(order)
        self.order = order
        return order

    def subscribe(self, table: str) -> Subscription:
        return self.hub.subscribe(table, self.user_id)


@pytest.fixture
def backend(user_id: UUID) -> FakeBackend:
    return FakeBackend(user_id)


@pytest.fixture
def folder_id() -> UUID:
    return uuid4()
