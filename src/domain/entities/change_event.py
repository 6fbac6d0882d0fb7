"""Change events delivered by the realtime feed."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from domain.entities.folder import Folder
from domain.entities.permission import Permission, resolve_permission
from domain.entities.todo import Todo

TODOS_TABLE = "todos"
FOLDERS_TABLE = "todo_folders"
TABLES = (TODOS_TABLE, FOLDERS_TABLE)

Record = Todo | Folder


class ChangeType(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A row-level change, carrying the full new row (and the old one for deletes)."""

    table: str
    type: ChangeType
    new: Record | None = None
    old: Record | None = None

    @property
    def record(self) -> Record:
        record = self.new if self.new is not None else self.old
        if record is None:
            raise ValueError("Change event carries no record")
        return record

    @property
    def entity_id(self) -> UUID:
        return self.record.id

    def visible_to(self, user_id: UUID) -> bool:
        """Whether the subscriber owns the row or appears in its shared_with set."""
        return resolve_permission(self.record, user_id) >= Permission.VIEW

    @classmethod
    def inserted(cls, record: Record) -> "ChangeEvent":
        return cls(table=_table_for(record), type=ChangeType.INSERT, new=record)

    @classmethod
    def updated(cls, record: Record) -> "ChangeEvent":
        return cls(table=_table_for(record), type=ChangeType.UPDATE, new=record)

    @classmethod
    def deleted(cls, record: Record) -> "ChangeEvent":
        return cls(table=_table_for(record), type=ChangeType.DELETE, old=record)


def _table_for(record: Record) -> str:
    return TODOS_TABLE if isinstance(record, Todo) else FOLDERS_TABLE
