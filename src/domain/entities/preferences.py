"""User preference document."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

TODO_ORDER_KEY = "todoOrder"
ROOT_SCOPE = "root"

TodoOrder = dict[str, list[str]]


def scope_key(folder_id: UUID | None) -> str:
    """Order scope for a folder, or ``"root"`` for unfiled todos."""
    return str(folder_id) if folder_id else ROOT_SCOPE


@dataclass
class UserPreferences:
    """Arbitrary per-user JSON document.

    Several features share the document; ``todoOrder`` is only one key of it.
    """

    user_id: UUID
    preferences: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def todo_order(self) -> TodoOrder:
        raw = self.preferences.get(TODO_ORDER_KEY) or {}
        return {str(key): [str(i) for i in ids] for key, ids in raw.items()}

    def with_todo_order(self, order: TodoOrder) -> dict[str, Any]:
        """Return the document with ``todoOrder`` replaced, other keys untouched."""
        return {**self.preferences, TODO_ORDER_KEY: {k: list(v) for k, v in order.items()}}
