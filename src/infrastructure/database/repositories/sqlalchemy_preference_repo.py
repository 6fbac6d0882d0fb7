"""SQLAlchemy implementation of the user preference repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.preferences import UserPreferences
from infrastructure.database.models import UserPreferencesModel


class SQLAlchemyPreferenceRepository:
    """SQLAlchemy implementation of IPreferenceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UUID) -> UserPreferences | None:
        """Get a user's preference document."""
        model = await self._get_model(user_id)
        return self._to_entity(model) if model else None

    async def upsert(self, preferences: UserPreferences) -> UserPreferences:
        """Insert the document, or replace it when the user already has one."""
        model = await self._get_model(preferences.user_id)
        if model is None:
            model = UserPreferencesModel(
                user_id=preferences.user_id,
                preferences=dict(preferences.preferences),
                created_at=preferences.created_at,
                updated_at=preferences.updated_at,
            )
            self._session.add(model)
        else:
            # Reassign so the JSON column is flagged dirty
            model.preferences = dict(preferences.preferences)
            model.updated_at = preferences.updated_at

        await self._session.flush()
        return self._to_entity(model)

    async def _get_model(self, user_id: UUID) -> UserPreferencesModel | None:
        stmt = select(UserPreferencesModel).where(UserPreferencesModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: UserPreferencesModel) -> UserPreferences:
        return UserPreferences(
            user_id=model.user_id,
            preferences=dict(model.preferences or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
