"""Pydantic schemas for Todo API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.permission import resolve_permission
from domain.entities.todo import Todo


class TodoCreate(BaseModel):
    """Schema for creating a Todo."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    folder_id: UUID | None = None


class TodoUpdate(BaseModel):
    """Schema for updating a Todo (all fields optional).

    Sending ``folder_id: null`` explicitly moves the todo to the root.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    is_complete: bool | None = None
    folder_id: UUID | None = None


class TodoBulkUpdate(BaseModel):
    """Set completion and/or folder on several todos at once."""

    ids: list[UUID] = Field(..., min_length=1, max_length=500)
    is_complete: bool | None = None
    folder_id: UUID | None = None


class TodoBulkDelete(BaseModel):
    ids: list[UUID] = Field(..., min_length=1, max_length=500)


class TodoResponse(BaseModel):
    """Schema for Todo response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "user_id": "9b2f6f8e-1c1e-4c55-9d5b-0e3f7f0f7a11",
                "folder_id": None,
                "title": "Milk",
                "description": None,
                "is_complete": False,
                "shared_with": [],
                "can_edit": [],
                "created_at": "2026-01-28T10:00:00",
                "permission": "owner",
            }
        },
    )

    id: UUID
    user_id: UUID
    folder_id: UUID | None
    title: str
    description: str | None
    is_complete: bool
    shared_with: list[UUID]
    can_edit: list[UUID]
    created_at: datetime
    permission: str | None = None

    @classmethod
    def from_entity(cls, todo: Todo, user_id: UUID) -> "TodoResponse":
        """Build the response, including the caller's effective permission."""
        return cls(
            id=todo.id,
            user_id=todo.user_id,
            folder_id=todo.folder_id,
            title=todo.title,
            description=todo.description,
            is_complete=todo.is_complete,
            shared_with=todo.shared_with,
            can_edit=todo.can_edit,
            created_at=todo.created_at,
            permission=resolve_permission(todo, user_id).name.lower(),
        )


class TodoListResponse(BaseModel):
    """Schema for list of Todos response."""

    data: list[TodoResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class TodoDetailResponse(BaseModel):
    """Schema for single Todo response."""

    data: TodoResponse


class BulkDeleteResponse(BaseModel):
    deleted_ids: list[UUID]
