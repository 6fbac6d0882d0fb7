"""SQLAlchemy implementation of the profile repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_except(self, user_id: UUID, limit: int) -> list[Profile]:
        """List profiles other than ``user_id``, ordered by email."""
        stmt = (
            select(ProfileModel)
            .where(ProfileModel.id != user_id)
            .order_by(ProfileModel.email)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [
            Profile(
                id=model.id,
                email=model.email,
                display_name=model.display_name,
                created_at=model.created_at,
            )
            for model in result.scalars()
        ]
