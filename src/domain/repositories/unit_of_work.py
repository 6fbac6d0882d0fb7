"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.folder_repository import IFolderRepository
from domain.repositories.preference_repository import IPreferenceRepository
from domain.repositories.profile_repository import IProfileRepository
from domain.repositories.todo_repository import ITodoRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    todos: ITodoRepository
    folders: IFolderRepository
    preferences: IPreferenceRepository
    profiles: IProfileRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
