"""Folder repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.folder import Folder


class IFolderRepository(Protocol):
    """Repository interface for Folder entities."""

    async def get(self, id: UUID) -> Folder | None:
        """Get a folder by ID."""
        ...

    async def get_owned(self, user_id: UUID) -> list[Folder]:
        """Get all folders owned by a user."""
        ...

    async def get_shared_with(self, user_id: UUID) -> list[Folder]:
        """Get all folders whose shared_with set contains the user."""
        ...

    async def create(self, folder: Folder) -> Folder:
        """Create a new folder."""
        ...

    async def update(self, folder: Folder) -> Folder:
        """Update name, description and sharing sets of a folder."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a folder and return success status."""
        ...
