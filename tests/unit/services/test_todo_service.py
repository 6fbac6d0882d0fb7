"""Unit tests for Todo service layer."""

from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    BlankFieldError,
    FolderNotFoundError,
    InsufficientPermissionsError,
    TodoNotFoundError,
)
from domain.entities.change_event import ChangeType
from domain.entities.folder import Folder
from domain.entities.todo import Todo
from domain.services.todo_service import TodoService, merge_unique

# FakeUnitOfWork is provided by the shared conftest at tests/unit/conftest.py.
# Import it here only for type-hint usage in fixtures/tests.
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork, feed: MagicMock) -> TodoService:
    """Create service with fake UoW and a recording change feed."""
    return TodoService(lambda: uow, feed)


@pytest.fixture
def sample_todo(user_id: UUID) -> Todo:
    return Todo(
        id=uuid4(),
        user_id=user_id,
        title="Sample Task",
        description="Sample description",
    )


def _published_types(feed: MagicMock) -> list[ChangeType]:
    return [call.args[0].type for call in feed.publish.call_args_list]


class TestMergeUnique:
    def test_keeps_first_occurrence(self, user_id: UUID) -> None:
        todo = Todo(user_id=user_id, title="Milk")
        copy = Todo(id=todo.id, user_id=user_id, title="Milk (shared copy)")
        other = Todo(user_id=user_id, title="Bread")

        result = merge_unique([todo], [copy, other])

        assert [t.title for t in result] == ["Milk", "Bread"]


class TestTodoServiceGetVisible:
    @pytest.mark.asyncio
    async def test_returns_owned_then_shared_without_duplicates(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ) -> None:
        """Owned todos come first; a todo in both queries appears once."""
        owned = Todo(user_id=user_id, title="Mine", shared_with=[user_id])
        shared = Todo(user_id=other_user_id, title="Theirs", shared_with=[user_id])
        uow.todos.get_owned.return_value = [owned]
        uow.todos.get_shared_with.return_value = [owned, shared]

        result = await service.get_visible_for_user(user_id)

        assert [t.id for t in result] == [owned.id, shared.id]
        uow.todos.get_owned.assert_called_once_with(user_id)
        uow.todos.get_shared_with.assert_called_once_with(user_id)


class TestTodoServiceGetById:
    @pytest.mark.asyncio
    async def test_returns_todo_when_found(
        self,
        service: TodoService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        sample_todo: Todo,
    ) -> None:
        uow.todos.get.return_value = sample_todo

        result = await service.get_by_id(sample_todo.id, user_id)

        assert result.id == sample_todo.id

    @pytest.mark.asyncio
    async def test_shared_viewer_can_read(
        self, service: TodoService, uow: FakeUnitOfWork, sample_todo: Todo, other_user_id: UUID
    ) -> None:
        sample_todo.shared_with = [other_user_id]
        uow.todos.get.return_value = sample_todo

        result = await service.get_by_id(sample_todo.id, other_user_id)

        assert result.id == sample_todo.id

    @pytest.mark.asyncio
    async def test_raises_when_not_found(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.todos.get.return_value = None

        with pytest.raises(TodoNotFoundError):
            await service.get_by_id(uuid4(), user_id)

    @pytest.mark.asyncio
    async def test_raises_when_not_shared(
        self, service: TodoService, uow: FakeUnitOfWork, sample_todo: Todo
    ) -> None:
        """A todo the caller cannot see is reported as not found."""
        uow.todos.get.return_value = sample_todo

        with pytest.raises(TodoNotFoundError):
            await service.get_by_id(sample_todo.id, uuid4())


class TestTodoServiceCreate:
    @pytest.mark.asyncio
    async def test_creates_root_todo(
        self, service: TodoService, uow: FakeUnitOfWork, feed: MagicMock, user_id: UUID
    ) -> None:
        expected = Todo(user_id=user_id, title="New Task")
        uow.todos.create.return_value = expected

        result = await service.create(user_id=user_id, title="New Task")

        created = uow.todos.create.call_args.args[0]
        assert created.folder_id is None
        assert created.shared_with == []
        assert result is expected
        assert uow.committed
        assert _published_types(feed) == [ChangeType.INSERT]

    @pytest.mark.asyncio
    async def test_inherits_folder_sharing(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ) -> None:
        """A todo created in a shared folder starts with the folder's sets."""
        folder = Folder(
            user_id=user_id,
            name="Groceries",
            shared_with=[other_user_id],
            can_edit=[other_user_id],
        )
        uow.folders.get.return_value = folder
        uow.todos.create.side_effect = lambda todo: todo

        result = await service.create(user_id=user_id, title="Milk", folder_id=folder.id)

        assert result.folder_id == folder.id
        assert result.shared_with == [other_user_id]
        assert result.can_edit == [other_user_id]
        assert result.shared_with is not folder.shared_with

    @pytest.mark.asyncio
    async def test_create_in_missing_folder_raises(
        self, service: TodoService, uow: FakeUnitOfWork, feed: MagicMock, user_id: UUID
    ) -> None:
        uow.folders.get.return_value = None

        with pytest.raises(FolderNotFoundError):
            await service.create(user_id=user_id, title="Task", folder_id=uuid4())

        uow.todos.create.assert_not_called()
        feed.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_viewer_cannot_add_to_folder(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ) -> None:
        folder = Folder(user_id=other_user_id, name="Groceries", shared_with=[user_id])
        uow.folders.get.return_value = folder

        with pytest.raises(InsufficientPermissionsError):
            await service.create(user_id=user_id, title="Task", folder_id=folder.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   "])
    async def test_blank_title_is_rejected(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, title: str
    ) -> None:
        with pytest.raises(BlankFieldError) as exc_info:
            await service.create(user_id=user_id, title=title)

        assert exc_info.value.details == {"field": "title"}
        uow.todos.create.assert_not_called()
        assert not uow.committed


class TestTodoServiceUpdate:
    @pytest.mark.asyncio
    async def test_blank_title_update_is_rejected(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, sample_todo: Todo
    ) -> None:
        uow.todos.get.return_value = sample_todo

        with pytest.raises(BlankFieldError):
            await service.update(todo_id=sample_todo.id, user_id=user_id, title=" ")

        uow.todos.update.assert_not_called()
        assert sample_todo.title == "Sample Task"

    @pytest.mark.asyncio
    async def test_updates_title(
        self,
        service: TodoService,
        uow: FakeUnitOfWork,
        feed: MagicMock,
        user_id: UUID,
        sample_todo: Todo,
    ) -> None:
        uow.todos.get.return_value = sample_todo
        uow.todos.update.side_effect = lambda todo: todo

        result = await service.update(todo_id=sample_todo.id, user_id=user_id, title="Updated")

        assert result.title == "Updated"
        assert result.description == "Sample description"
        assert uow.committed
        assert _published_types(feed) == [ChangeType.UPDATE]

    @pytest.mark.asyncio
    async def test_editor_can_complete(
        self, service: TodoService, uow: FakeUnitOfWork, sample_todo: Todo, other_user_id: UUID
    ) -> None:
        sample_todo.shared_with = [other_user_id]
        sample_todo.can_edit = [other_user_id]
        uow.todos.get.return_value = sample_todo
        uow.todos.update.side_effect = lambda todo: todo

        result = await service.update(sample_todo.id, other_user_id, is_complete=True)

        assert result.is_complete

    @pytest.mark.asyncio
    async def test_viewer_cannot_update(
        self, service: TodoService, uow: FakeUnitOfWork, sample_todo: Todo, other_user_id: UUID
    ) -> None:
        sample_todo.shared_with = [other_user_id]
        uow.todos.get.return_value = sample_todo

        with pytest.raises(InsufficientPermissionsError):
            await service.update(sample_todo.id, other_user_id, title="Nope")

        uow.todos.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_explicit_none_moves_to_root(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, sample_todo: Todo
    ) -> None:
        sample_todo.folder_id = uuid4()
        uow.todos.get.return_value = sample_todo
        uow.todos.update.side_effect = lambda todo: todo

        result = await service.update(sample_todo.id, user_id, folder_id=None)

        assert result.folder_id is None
        uow.folders.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_not_found_raises(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.todos.get.return_value = None

        with pytest.raises(TodoNotFoundError):
            await service.update(todo_id=uuid4(), user_id=user_id, title="Updated")


class TestTodoServiceBulkUpdate:
    @pytest.mark.asyncio
    async def test_moves_all_todos_in_one_write(
        self, service: TodoService, uow: FakeUnitOfWork, feed: MagicMock, user_id: UUID
    ) -> None:
        todos = [Todo(user_id=user_id, title=f"Task {i}") for i in range(3)]
        ids = [t.id for t in todos]
        folder = Folder(user_id=user_id, name="Work")
        uow.todos.get_many.return_value = todos
        uow.folders.get.return_value = folder
        uow.todos.update_many.return_value = todos

        result = await service.bulk_update(ids, user_id, folder_id=folder.id)

        assert len(result) == 3
        uow.todos.update_many.assert_called_once_with(ids, {"folder_id": folder.id})
        assert uow.committed
        assert _published_types(feed) == [ChangeType.UPDATE] * 3

    @pytest.mark.asyncio
    async def test_missing_id_rejects_whole_batch(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        present = Todo(user_id=user_id, title="Here")
        uow.todos.get_many.return_value = [present]

        with pytest.raises(TodoNotFoundError):
            await service.bulk_update([present.id, uuid4()], user_id, is_complete=True)

        uow.todos.update_many.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_no_values_is_a_no_op(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        result = await service.bulk_update([uuid4()], user_id)

        assert result == []
        uow.todos.get_many.assert_not_called()


class TestTodoServiceDelete:
    @pytest.mark.asyncio
    async def test_deletes_todo(
        self,
        service: TodoService,
        uow: FakeUnitOfWork,
        feed: MagicMock,
        user_id: UUID,
        sample_todo: Todo,
    ) -> None:
        uow.todos.get_many.return_value = [sample_todo]
        uow.todos.delete_many.return_value = [sample_todo]

        result = await service.delete(sample_todo.id, user_id)

        assert result is True
        assert uow.committed
        event = feed.publish.call_args.args[0]
        assert event.type is ChangeType.DELETE
        assert event.old is sample_todo

    @pytest.mark.asyncio
    async def test_editor_cannot_delete(
        self, service: TodoService, uow: FakeUnitOfWork, sample_todo: Todo, other_user_id: UUID
    ) -> None:
        sample_todo.shared_with = [other_user_id]
        sample_todo.can_edit = [other_user_id]
        uow.todos.get_many.return_value = [sample_todo]

        with pytest.raises(InsufficientPermissionsError):
            await service.delete(sample_todo.id, other_user_id)

        uow.todos.delete_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_delete_is_all_or_nothing(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ) -> None:
        mine = Todo(user_id=user_id, title="Mine")
        theirs = Todo(user_id=other_user_id, title="Theirs", shared_with=[user_id])
        uow.todos.get_many.return_value = [mine, theirs]

        with pytest.raises(InsufficientPermissionsError):
            await service.bulk_delete([mine.id, theirs.id], user_id)

        uow.todos.delete_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_not_found_raises(
        self, service: TodoService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.todos.get_many.return_value = []

        with pytest.raises(TodoNotFoundError):
            await service.delete(uuid4(), user_id)
