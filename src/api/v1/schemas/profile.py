"""Pydantic schemas for profiles."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: str | None


class ProfileListResponse(BaseModel):
    data: list[ProfileResponse]
