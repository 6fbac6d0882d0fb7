"""Todo domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class Todo:
    """Domain entity for a Todo, optionally filed under a folder."""

    user_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
    folder_id: UUID | None = None
    description: str | None = None
    is_complete: bool = False
    shared_with: list[UUID] = field(default_factory=list)
    can_edit: list[UUID] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
