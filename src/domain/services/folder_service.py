"""Folder service layer: folder CRUD and the sharing cascade."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    BlankFieldError,
    FolderNotFoundError,
    InsufficientPermissionsError,
    InvalidShareTargetError,
)
from domain.entities.change_event import ChangeEvent
from domain.entities.folder import Folder
from domain.entities.permission import (
    Permission,
    ShareLevel,
    grant,
    has_permission,
    resolve_permission,
)
from domain.repositories.change_feed import IChangeFeed
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class FolderService:
    """Service layer for Folder business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        change_feed: IChangeFeed | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._feed = change_feed

    async def get_owned(self, user_id: UUID) -> list[Folder]:
        """Get the folders a user owns."""
        async with self._uow_factory() as uow:
            return await uow.folders.get_owned(user_id)  # type: ignore[no-any-return]

    async def get_shared(self, user_id: UUID) -> list[Folder]:
        """Get the folders shared with a user."""
        async with self._uow_factory() as uow:
            return await uow.folders.get_shared_with(user_id)  # type: ignore[no-any-return]

    async def get_visible_for_user(self, user_id: UUID) -> list[Folder]:
        """Get owned and shared folders, de-duplicated by id (owned first)."""
        async with self._uow_factory() as uow:
            owned = await uow.folders.get_owned(user_id)
            shared = await uow.folders.get_shared_with(user_id)
        seen: dict[UUID, Folder] = {}
        for folder in [*owned, *shared]:
            seen.setdefault(folder.id, folder)
        return list(seen.values())

    async def get_by_id(self, folder_id: UUID, user_id: UUID) -> Folder:
        """Get a folder the user can at least view."""
        async with self._uow_factory() as uow:
            return await self._get_with(uow, folder_id, user_id, Permission.VIEW)

    async def create(self, user_id: UUID, name: str, description: str | None = None) -> Folder:
        """Create a new, unshared folder."""
        if not name.strip():
            raise BlankFieldError("name")

        async with self._uow_factory() as uow:
            created = await uow.folders.create(
                Folder(user_id=user_id, name=name, description=description)
            )
            await uow.commit()

        self._publish([ChangeEvent.inserted(created)])
        return created

    async def update(
        self,
        folder_id: UUID,
        user_id: UUID,
        name: str | None = None,
        description: str | None = None,
    ) -> Folder:
        """Rename or re-describe a folder. Requires edit access."""
        if name is not None and not name.strip():
            raise BlankFieldError("name")

        async with self._uow_factory() as uow:
            folder = await self._get_with(uow, folder_id, user_id, Permission.EDIT)
            if name is not None:
                folder.name = name
            if description is not None:
                folder.description = description

            updated = await uow.folders.update(folder)
            await uow.commit()

        self._publish([ChangeEvent.updated(updated)])
        return updated

    async def delete(self, folder_id: UUID, user_id: UUID) -> list[UUID]:
        """Delete a folder after moving its todos to the root.

        The todos are detached before the folder row is removed so that a
        failure between the two steps can never leave a todo pointing at a
        missing folder. Both steps share one transaction.

        Returns:
            IDs of the todos that were detached.
        """
        async with self._uow_factory() as uow:
            folder = await self._get_with(uow, folder_id, user_id, Permission.OWNER)

            detached = await uow.todos.detach_from_folder(folder.id)
            await uow.folders.delete(folder.id)
            await uow.commit()

        logger.info("folder_deleted", folder_id=str(folder_id), detached_count=len(detached))
        self._publish([*(ChangeEvent.updated(t) for t in detached), ChangeEvent.deleted(folder)])
        return [t.id for t in detached]

    async def share(
        self,
        folder_id: UUID,
        user_id: UUID,
        target_user_id: UUID,
        level: ShareLevel,
    ) -> Folder:
        """Share a folder and cascade its sharing sets to every member todo.

        The member todos receive the folder's resulting sets verbatim; any
        todo-level sharing that diverged from the folder is overwritten.
        Only the owner may share.
        """
        async with self._uow_factory() as uow:
            folder = await self._get_with(uow, folder_id, user_id, Permission.OWNER)
            if target_user_id == folder.user_id:
                raise InvalidShareTargetError(str(target_user_id))

            folder.shared_with, folder.can_edit = grant(
                folder.shared_with, folder.can_edit, target_user_id, level
            )
            updated = await uow.folders.update(folder)
            cascaded = await uow.todos.set_folder_permissions(
                folder.id, updated.shared_with, updated.can_edit
            )
            await uow.commit()

        logger.info(
            "folder_shared",
            folder_id=str(folder_id),
            target_user_id=str(target_user_id),
            level=level.value,
            cascaded_count=len(cascaded),
        )
        self._publish([ChangeEvent.updated(updated), *(ChangeEvent.updated(t) for t in cascaded)])
        return updated

    async def _get_with(
        self,
        uow: IUnitOfWork,
        folder_id: UUID,
        user_id: UUID,
        required: Permission,
    ) -> Folder:
        """Load a folder and verify the user holds at least ``required`` on it."""
        folder = await uow.folders.get(folder_id)
        if not folder:
            raise FolderNotFoundError(str(folder_id))
        permission = resolve_permission(folder, user_id)
        if permission == Permission.NO_ACCESS:
            raise FolderNotFoundError(str(folder_id))
        if not has_permission(permission, required):
            raise InsufficientPermissionsError(required.name.lower())
        return folder

    def _publish(self, events: list[ChangeEvent]) -> None:
        if not self._feed:
            return
        for event in events:
            self._feed.publish(event)
