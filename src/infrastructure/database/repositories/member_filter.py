"""Membership filter for JSON user-id lists (``shared_with``/``can_edit``)."""

from typing import Any
from uuid import UUID

from sqlalchemy import String, cast
from sqlalchemy.ext.asyncio import AsyncSession


def contains_member(session: AsyncSession, column: Any, user_id: UUID) -> Any:
    """Build a WHERE clause matching rows whose JSON list contains ``user_id``.

    Postgres uses JSONB containment (``@>``, GIN-indexable). SQLite, used in
    tests, has no containment operator, so the serialized list is matched as
    text instead.
    """
    bind = session.bind
    dialect = bind.dialect.name if bind is not None else "postgresql"
    if dialect == "postgresql":
        return column.contains([str(user_id)])
    return cast(column, String).like(f'%"{user_id}"%')


def to_ids(values: list[str] | None) -> list[UUID]:
    """Convert a stored list of id strings to UUIDs."""
    return [UUID(str(v)) for v in values or []]


def from_ids(values: list[UUID]) -> list[str]:
    """Convert UUIDs to the stored list of id strings."""
    return [str(v) for v in values]
