"""Folder domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class Folder:
    """Domain entity for a named, shareable group of todos.

    A folder is the unit of sharing truth: sharing it overwrites the
    ``shared_with``/``can_edit`` sets of every todo filed under it.
    """

    user_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    shared_with: list[UUID] = field(default_factory=list)
    can_edit: list[UUID] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
