"""User preference routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_preference_service
from api.v1.schemas.preferences import TodoOrderResponse, TodoOrderUpdate
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.preference_service import PreferenceService

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get(
    "/todo-order",
    response_model=TodoOrderResponse,
    summary="Get manual todo order",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_todo_order(
    request: Request,
    user: CurrentUser,
    service: PreferenceService = Depends(get_preference_service),
) -> TodoOrderResponse:
    """Get the caller's `todoOrder` map; empty when never saved."""
    return TodoOrderResponse(todo_order=await service.get_todo_order(user.id))


@router.put(
    "/todo-order",
    response_model=TodoOrderResponse,
    summary="Save manual todo order",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def save_todo_order(
    request: Request,
    body: TodoOrderUpdate,
    user: CurrentUser,
    service: PreferenceService = Depends(get_preference_service),
) -> TodoOrderResponse:
    """Replace the `todoOrder` map. Other preference keys are left untouched."""
    order = {scope: [str(i) for i in ids] for scope, ids in body.todo_order.items()}
    return TodoOrderResponse(todo_order=await service.save_todo_order(user.id, order))
