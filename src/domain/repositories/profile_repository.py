"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for user profiles."""

    async def list_except(self, user_id: UUID, limit: int) -> list[Profile]:
        """List profiles other than ``user_id``, ordered by email."""
        ...
