"""Realtime change feed over WebSocket.

Clients connect to ``/realtime/{table}?token=<jwt>`` and receive one JSON
message per change to a row they own or are shared on.
"""

import asyncio
import contextlib
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from api.dependencies.auth import authenticate_token, get_auth_provider
from api.v1.dependencies import get_change_hub
from api.v1.schemas.folder import FolderResponse
from api.v1.schemas.realtime import ChangeEventMessage
from api.v1.schemas.todo import TodoResponse
from core.exceptions import AppException
from domain.entities.change_event import TABLES, ChangeEvent, Record
from domain.entities.todo import Todo
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.realtime.change_hub import ChangeHub, Subscription

logger = structlog.get_logger()

router = APIRouter(prefix="/realtime", tags=["realtime"])


def _record_payload(record: Record | None, user_id: UUID) -> Any:
    if record is None:
        return None
    if isinstance(record, Todo):
        return TodoResponse.from_entity(record, user_id)
    return FolderResponse.from_entity(record, user_id)


def build_event_message(event: ChangeEvent, user_id: UUID) -> dict[str, Any]:
    """Serialize a change event for one subscriber."""
    message = ChangeEventMessage(
        table=event.table,
        type=event.type.value,
        new=_record_payload(event.new, user_id),
        old=_record_payload(event.old, user_id),
    )
    return message.model_dump(mode="json")


@router.websocket("/{table}")
async def realtime_feed(
    websocket: WebSocket,
    table: str,
    token: str | None = Query(None),
    hub: ChangeHub = Depends(get_change_hub),
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> None:
    """Stream change events for ``table`` to the authenticated caller."""
    if table not in TABLES:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown table")
        return

    try:
        user = await authenticate_token(token, auth_provider)
    except AppException as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.message)
        return

    await websocket.accept()
    subscription = hub.subscribe(table, user.id)
    log = logger.bind(table=table, user_id=str(user.id))
    log.info("realtime_connected")

    sender = asyncio.create_task(_forward(websocket, subscription, user.id))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        subscription.close()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
        log.info("realtime_disconnected")


async def _forward(websocket: WebSocket, subscription: Subscription, user_id: UUID) -> None:
    async for event in subscription:
        await websocket.send_json(build_event_message(event, user_id))
