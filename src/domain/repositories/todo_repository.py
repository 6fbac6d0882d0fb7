"""Todo repository protocol."""

from typing import Any, Protocol
from uuid import UUID

from domain.entities.todo import Todo


class ITodoRepository(Protocol):
    """Repository interface for Todo entities."""

    async def get(self, id: UUID) -> Todo | None:
        """Get a todo by ID."""
        ...

    async def get_many(self, ids: list[UUID]) -> list[Todo]:
        """Get the todos among ``ids`` that exist."""
        ...

    async def get_owned(self, user_id: UUID) -> list[Todo]:
        """Get all todos owned by a user."""
        ...

    async def get_shared_with(self, user_id: UUID) -> list[Todo]:
        """Get all todos whose shared_with set contains the user."""
        ...

    async def get_in_folder(self, folder_id: UUID) -> list[Todo]:
        """Get all todos filed under a folder."""
        ...

    async def create(self, todo: Todo) -> Todo:
        """Create a new todo."""
        ...

    async def update(self, todo: Todo) -> Todo:
        """Update an existing todo."""
        ...

    async def update_many(self, ids: list[UUID], values: dict[str, Any]) -> list[Todo]:
        """Set the same field values on every todo in ``ids``."""
        ...

    async def set_folder_permissions(
        self, folder_id: UUID, shared_with: list[UUID], can_edit: list[UUID]
    ) -> list[Todo]:
        """Overwrite the sharing sets of every todo in a folder."""
        ...

    async def detach_from_folder(self, folder_id: UUID) -> list[Todo]:
        """Move every todo of a folder to the root."""
        ...

    async def delete_many(self, ids: list[UUID]) -> list[Todo]:
        """Delete todos and return the deleted rows."""
        ...
