"""Profile lookups used when picking who to share a folder with."""

from collections.abc import Callable
from uuid import UUID

from core.config import settings
from domain.entities.profile import Profile
from domain.repositories.unit_of_work import IUnitOfWork


class ProfileService:
    """Service layer for user profiles."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_share_candidates(self, user_id: UUID, limit: int | None = None) -> list[Profile]:
        """List users a folder can be shared with (everyone but the caller)."""
        async with self._uow_factory() as uow:
            return await uow.profiles.list_except(  # type: ignore[no-any-return]
                user_id, limit or settings.share_candidate_limit
            )
