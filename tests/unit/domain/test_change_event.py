"""Unit tests for change events."""

from uuid import uuid4

import pytest

from domain.entities.change_event import (
    FOLDERS_TABLE,
    TODOS_TABLE,
    ChangeEvent,
    ChangeType,
)
from domain.entities.folder import Folder
from domain.entities.todo import Todo


class TestChangeEvent:
    def test_insert_targets_todos_table(self) -> None:
        todo = Todo(user_id=uuid4(), title="Milk")

        event = ChangeEvent.inserted(todo)

        assert event.table == TODOS_TABLE
        assert event.type is ChangeType.INSERT
        assert event.entity_id == todo.id

    def test_folder_update_targets_folders_table(self) -> None:
        folder = Folder(user_id=uuid4(), name="Groceries")

        event = ChangeEvent.updated(folder)

        assert event.table == FOLDERS_TABLE
        assert event.new is folder

    def test_delete_carries_old_row(self) -> None:
        todo = Todo(user_id=uuid4(), title="Milk")

        event = ChangeEvent.deleted(todo)

        assert event.new is None
        assert event.old is todo
        assert event.record is todo

    def test_visible_to_owner_and_shared_users_only(self) -> None:
        owner, viewer, stranger = uuid4(), uuid4(), uuid4()
        todo = Todo(user_id=owner, title="Milk", shared_with=[viewer])
        event = ChangeEvent.updated(todo)

        assert event.visible_to(owner)
        assert event.visible_to(viewer)
        assert not event.visible_to(stranger)

    def test_event_without_record_raises(self) -> None:
        event = ChangeEvent(table=TODOS_TABLE, type=ChangeType.UPDATE)

        with pytest.raises(ValueError):
            _ = event.record
