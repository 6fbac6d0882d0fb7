"""SQLAlchemy implementation of Todo repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.todo import Todo
from infrastructure.database.models import TodoModel
from infrastructure.database.repositories.member_filter import (
    contains_member,
    from_ids,
    to_ids,
)

# Entity fields that may be bulk-assigned through update_many
_BULK_FIELDS = frozenset({"is_complete", "folder_id", "title", "description"})


class SQLAlchemyTodoRepository:
    """SQLAlchemy implementation of ITodoRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Todo | None:
        """Get a todo by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[UUID]) -> list[Todo]:
        """Get the todos among ``ids`` that exist."""
        return [self._to_entity(m) for m in await self._get_models(ids)]

    async def get_owned(self, user_id: UUID) -> list[Todo]:
        """Get all todos owned by a user, oldest first."""
        stmt = (
            select(TodoModel)
            .where(TodoModel.user_id == user_id)
            .order_by(TodoModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_shared_with(self, user_id: UUID) -> list[Todo]:
        """Get all todos whose shared_with list contains the user."""
        stmt = (
            select(TodoModel)
            .where(contains_member(self._session, TodoModel.shared_with, user_id))
            .order_by(TodoModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_in_folder(self, folder_id: UUID) -> list[Todo]:
        """Get all todos filed under a folder."""
        stmt = (
            select(TodoModel)
            .where(TodoModel.folder_id == folder_id)
            .order_by(TodoModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, todo: Todo) -> Todo:
        """Create a new todo."""
        model = self._to_model(todo)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, todo: Todo) -> Todo:
        """Update an existing todo."""
        model = await self._get_model(todo.id)
        if not model:
            raise ValueError(f"Todo {todo.id} not found")

        model.title = todo.title
        model.description = todo.description
        model.is_complete = todo.is_complete
        model.folder_id = todo.folder_id
        model.shared_with = from_ids(todo.shared_with)
        model.can_edit = from_ids(todo.can_edit)

        await self._session.flush()
        return self._to_entity(model)

    async def update_many(self, ids: list[UUID], values: dict[str, Any]) -> list[Todo]:
        """Set the same field values on every todo in ``ids``."""
        unknown = set(values) - _BULK_FIELDS
        if unknown:
            raise ValueError(f"Cannot bulk update fields: {sorted(unknown)}")

        models = await self._get_models(ids)
        for model in models:
            for name, value in values.items():
                setattr(model, name, value)

        await self._session.flush()
        return [self._to_entity(m) for m in models]

    async def set_folder_permissions(
        self, folder_id: UUID, shared_with: list[UUID], can_edit: list[UUID]
    ) -> list[Todo]:
        """Overwrite the sharing lists of every todo in a folder."""
        models = await self._get_folder_models(folder_id)
        for model in models:
            model.shared_with = from_ids(shared_with)
            model.can_edit = from_ids(can_edit)

        await self._session.flush()
        return [self._to_entity(m) for m in models]

    async def detach_from_folder(self, folder_id: UUID) -> list[Todo]:
        """Move every todo of a folder to the root."""
        models = await self._get_folder_models(folder_id)
        for model in models:
            model.folder_id = None

        await self._session.flush()
        return [self._to_entity(m) for m in models]

    async def delete_many(self, ids: list[UUID]) -> list[Todo]:
        """Delete todos and return the rows as they were before deletion."""
        models = await self._get_models(ids)
        deleted = [self._to_entity(m) for m in models]
        for model in models:
            await self._session.delete(model)

        await self._session.flush()
        return deleted

    async def _get_model(self, id: UUID) -> TodoModel | None:
        stmt = select(TodoModel).where(TodoModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_models(self, ids: list[UUID]) -> list[TodoModel]:
        if not ids:
            return []
        stmt = select(TodoModel).where(TodoModel.id.in_(ids)).order_by(TodoModel.created_at)
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def _get_folder_models(self, folder_id: UUID) -> list[TodoModel]:
        stmt = select(TodoModel).where(TodoModel.folder_id == folder_id)
        result = await self._session.execute(stmt)
        return list(result.scalars())

    def _to_entity(self, model: TodoModel) -> Todo:
        """Convert ORM model to domain entity."""
        return Todo(
            id=model.id,
            user_id=model.user_id,
            folder_id=model.folder_id,
            title=model.title,
            description=model.description,
            is_complete=model.is_complete,
            shared_with=to_ids(model.shared_with),
            can_edit=to_ids(model.can_edit),
            created_at=model.created_at,
        )

    def _to_model(self, entity: Todo) -> TodoModel:
        """Convert domain entity to ORM model."""
        return TodoModel(
            id=entity.id,
            user_id=entity.user_id,
            folder_id=entity.folder_id,
            title=entity.title,
            description=entity.description,
            is_complete=entity.is_complete,
            shared_with=from_ids(entity.shared_with),
            can_edit=from_ids(entity.can_edit),
            created_at=entity.created_at,
        )
