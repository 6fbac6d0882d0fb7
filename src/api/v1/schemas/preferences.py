"""Pydantic schemas for user preferences."""

from uuid import UUID

from pydantic import BaseModel, Field


class TodoOrderUpdate(BaseModel):
    """Full ``todoOrder`` map: scope key (folder id or ``root``) to todo ids."""

    todo_order: dict[str, list[UUID]] = Field(default_factory=dict)


class TodoOrderResponse(BaseModel):
    todo_order: dict[str, list[str]]
