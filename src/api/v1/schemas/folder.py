"""Pydantic schemas for Folder API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.folder import Folder
from domain.entities.permission import ShareLevel, resolve_permission


class FolderCreate(BaseModel):
    """Schema for creating a Folder."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)


class FolderUpdate(BaseModel):
    """Schema for updating a Folder (all fields optional)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)


class FolderShareRequest(BaseModel):
    """Share a folder with another user."""

    user_id: UUID
    permission: ShareLevel = ShareLevel.VIEW


class FolderResponse(BaseModel):
    """Schema for Folder response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    description: str | None
    shared_with: list[UUID]
    can_edit: list[UUID]
    created_at: datetime
    permission: str | None = None

    @classmethod
    def from_entity(cls, folder: Folder, user_id: UUID) -> "FolderResponse":
        return cls(
            id=folder.id,
            user_id=folder.user_id,
            name=folder.name,
            description=folder.description,
            shared_with=folder.shared_with,
            can_edit=folder.can_edit,
            created_at=folder.created_at,
            permission=resolve_permission(folder, user_id).name.lower(),
        )


class FolderListResponse(BaseModel):
    data: list[FolderResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class FolderDetailResponse(BaseModel):
    data: FolderResponse


class FolderDeleteResponse(BaseModel):
    """IDs of the todos that were moved to the root before the delete."""

    detached_todo_ids: list[UUID]
