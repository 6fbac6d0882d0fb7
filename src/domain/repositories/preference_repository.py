"""User preference repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.preferences import UserPreferences


class IPreferenceRepository(Protocol):
    """Repository interface for the per-user preference document."""

    async def get(self, user_id: UUID) -> UserPreferences | None:
        """Get a user's preference document, None if never written."""
        ...

    async def upsert(self, preferences: UserPreferences) -> UserPreferences:
        """Insert or replace a user's preference document."""
        ...
