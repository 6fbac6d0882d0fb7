"""Messages sent over the realtime WebSocket."""

from typing import Literal

from pydantic import BaseModel

from api.v1.schemas.folder import FolderResponse
from api.v1.schemas.todo import TodoResponse


class ChangeEventMessage(BaseModel):
    table: str
    type: Literal["INSERT", "UPDATE", "DELETE"]
    new: TodoResponse | FolderResponse | None = None
    old: TodoResponse | FolderResponse | None = None
