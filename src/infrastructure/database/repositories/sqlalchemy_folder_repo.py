"""SQLAlchemy implementation of Folder repository."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.folder import Folder
from infrastructure.database.models import FolderModel
from infrastructure.database.repositories.member_filter import (
    contains_member,
    from_ids,
    to_ids,
)


class SQLAlchemyFolderRepository:
    """SQLAlchemy implementation of IFolderRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Folder | None:
        """Get a folder by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_owned(self, user_id: UUID) -> list[Folder]:
        """Get all folders owned by a user, oldest first."""
        stmt = (
            select(FolderModel)
            .where(FolderModel.user_id == user_id)
            .order_by(FolderModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_shared_with(self, user_id: UUID) -> list[Folder]:
        """Get all folders whose shared_with list contains the user."""
        stmt = (
            select(FolderModel)
            .where(contains_member(self._session, FolderModel.shared_with, user_id))
            .order_by(FolderModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, folder: Folder) -> Folder:
        """Create a new folder."""
        model = self._to_model(folder)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, folder: Folder) -> Folder:
        """Update name, description and sharing lists of a folder."""
        model = await self._get_model(folder.id)
        if not model:
            raise ValueError(f"Folder {folder.id} not found")

        model.name = folder.name
        model.description = folder.description
        model.shared_with = from_ids(folder.shared_with)
        model.can_edit = from_ids(folder.can_edit)

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a folder and return success status."""
        stmt = delete(FolderModel).where(FolderModel.id == id)
        result = await self._session.execute(stmt)
        return bool(result.rowcount and result.rowcount > 0)  # type: ignore[attr-defined]

    async def _get_model(self, id: UUID) -> FolderModel | None:
        stmt = select(FolderModel).where(FolderModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: FolderModel) -> Folder:
        """Convert ORM model to domain entity."""
        return Folder(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            description=model.description,
            shared_with=to_ids(model.shared_with),
            can_edit=to_ids(model.can_edit),
            created_at=model.created_at,
        )

    def _to_model(self, entity: Folder) -> FolderModel:
        """Convert domain entity to ORM model."""
        return FolderModel(
            id=entity.id,
            user_id=entity.user_id,
            name=entity.name,
            description=entity.description,
            shared_with=from_ids(entity.shared_with),
            can_edit=from_ids(entity.can_edit),
            created_at=entity.created_at,
        )
