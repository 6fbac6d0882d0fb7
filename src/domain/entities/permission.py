"""Sharing permissions for todos and folders.

Access to a todo or folder is never stored directly; it is derived from three
fields every shareable record carries:

    user_id      the owner, implicitly a full editor
    shared_with  users granted at least view access
    can_edit     users granted edit access

``resolve_permission`` is the single place that turns those fields into a
``Permission`` and is used by every access check in the service and sync
layers.
"""

from collections.abc import Iterable, Sequence
from enum import IntEnum, StrEnum
from typing import Protocol
from uuid import UUID


class Permission(IntEnum):
    """Effective access level. Higher value = more permissions.

    Use >= comparison for permission checks:
        resolve_permission(todo, user_id) >= Permission.EDIT
    """

    NO_ACCESS = 0
    VIEW = 10
    EDIT = 20
    OWNER = 30


class ShareLevel(StrEnum):
    """Level requested when sharing a folder with another user."""

    VIEW = "view"
    EDIT = "edit"
    MANAGE = "manage"

    @property
    def grants_edit(self) -> bool:
        return self in (ShareLevel.EDIT, ShareLevel.MANAGE)


class Shareable(Protocol):
    user_id: UUID
    shared_with: list[UUID]
    can_edit: list[UUID]


def resolve_permission(entity: Shareable, user_id: UUID) -> Permission:
    """Compute the caller's permission on a todo or folder."""
    if entity.user_id == user_id:
        return Permission.OWNER
    if user_id in entity.can_edit:
        return Permission.EDIT
    if user_id in entity.shared_with:
        return Permission.VIEW
    return Permission.NO_ACCESS


def has_permission(permission: Permission, required: Permission) -> bool:
    """Check if a permission meets the required level."""
    return permission >= required


def with_member(members: Iterable[UUID], user_id: UUID) -> list[UUID]:
    """Return ``members`` with ``user_id`` added, keeping order and uniqueness."""
    result = list(dict.fromkeys(members))
    if user_id not in result:
        result.append(user_id)
    return result


def grant(
    shared_with: Sequence[UUID],
    can_edit: Sequence[UUID],
    user_id: UUID,
    level: ShareLevel,
) -> tuple[list[UUID], list[UUID]]:
    """Add ``user_id`` to the sharing sets at ``level``.

    Both sets behave as mathematical sets, so granting the same level twice
    yields the same result as granting it once. Granting ``view`` never removes
    an existing edit grant.
    """
    new_shared = with_member(shared_with, user_id)
    new_can_edit = with_member(can_edit, user_id) if level.grants_edit else list(can_edit)
    return new_shared, new_can_edit
