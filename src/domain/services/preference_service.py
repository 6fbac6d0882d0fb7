"""Per-user preference document, including the manual todo order."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from domain.entities.preferences import TodoOrder, UserPreferences
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class PreferenceService:
    """Service layer for user preferences."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_todo_order(self, user_id: UUID) -> TodoOrder:
        """Get the user's todo order map; an unsaved document is an empty map."""
        async with self._uow_factory() as uow:
            preferences = await uow.preferences.get(user_id)
        if preferences is None:
            return {}
        return preferences.todo_order

    async def save_todo_order(self, user_id: UUID, order: TodoOrder) -> TodoOrder:
        """Replace the ``todoOrder`` key, preserving every other preference key.

        Reads the stored document and merges into it inside one transaction
        rather than upserting a document that only holds ``todoOrder``.
        """
        async with self._uow_factory() as uow:
            current = await uow.preferences.get(user_id) or UserPreferences(user_id=user_id)
            current.preferences = current.with_todo_order(order)
            current.updated_at = datetime.utcnow()

            saved = await uow.preferences.upsert(current)
            await uow.commit()

        logger.debug("todo_order_saved", user_id=str(user_id), scopes=len(order))
        return saved.todo_order
