"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.folder_service import FolderService
from domain.services.preference_service import PreferenceService
from domain.services.profile_service import ProfileService
from domain.services.todo_service import TodoService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.realtime.change_hub import ChangeHub


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_change_hub() -> ChangeHub:
    """Process-wide realtime hub shared by every service that writes."""
    return ChangeHub()


@lru_cache
def get_todo_service() -> TodoService:
    """Get Todo service instance."""
    return TodoService(get_uow_factory(), change_feed=get_change_hub())


@lru_cache
def get_folder_service() -> FolderService:
    """Get Folder service instance."""
    return FolderService(get_uow_factory(), change_feed=get_change_hub())


@lru_cache
def get_preference_service() -> PreferenceService:
    """Get Preference service instance."""
    return PreferenceService(get_uow_factory())


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory())
