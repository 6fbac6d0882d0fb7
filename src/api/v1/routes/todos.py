"""Todo API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_todo_service
from api.v1.schemas.todo import (
    BulkDeleteResponse,
    TodoBulkDelete,
    TodoBulkUpdate,
    TodoCreate,
    TodoDetailResponse,
    TodoListResponse,
    TodoResponse,
    TodoUpdate,
)
from core.rate_limit import BULK_LIMIT, READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.todo_service import TodoService

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get(
    "",
    response_model=TodoListResponse,
    summary="List visible todos",
    responses={
        200: {"description": "Owned todos followed by todos shared with the caller"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_todos(
    request: Request,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
    folder_id: UUID | None = Query(None, description="Only todos filed under this folder"),
    include_completed: bool = Query(True, description="Include completed todos"),
) -> TodoListResponse:
    """
    Get every todo the caller owns or that has been shared with them.

    Each todo appears once even when it is both owned and shared.
    """
    todos = await service.get_visible_for_user(user.id)
    if folder_id is not None:
        todos = [t for t in todos if t.folder_id == folder_id]
    if not include_completed:
        todos = [t for t in todos if not t.is_complete]

    data = [TodoResponse.from_entity(t, user.id) for t in todos]
    return TodoListResponse(
        data=data,
        meta={
            "total": len(data),
            "owned_count": len([t for t in todos if t.user_id == user.id]),
        },
    )


@router.get(
    "/{todo_id}",
    response_model=TodoDetailResponse,
    summary="Get a todo",
    responses={
        200: {"description": "Todo details"},
        404: {"description": "Todo not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_todo(
    request: Request,
    todo_id: UUID,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
) -> TodoDetailResponse:
    """Get a specific todo the caller can view."""
    todo = await service.get_by_id(todo_id, user.id)
    return TodoDetailResponse(data=TodoResponse.from_entity(todo, user.id))


@router.post(
    "",
    response_model=TodoDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a todo",
    responses={
        201: {"description": "Todo created successfully"},
        403: {"description": "No edit access to the folder"},
        404: {"description": "Folder not found"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_todo(
    request: Request,
    body: TodoCreate,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
) -> TodoDetailResponse:
    """
    Create a todo owned by the caller.

    When `folder_id` is given, the todo inherits the folder's current
    `shared_with` and `can_edit` lists.
    """
    todo = await service.create(
        user_id=user.id,
        title=body.title,
        description=body.description,
        folder_id=body.folder_id,
    )
    return TodoDetailResponse(data=TodoResponse.from_entity(todo, user.id))


@router.patch(
    "/{todo_id}",
    response_model=TodoDetailResponse,
    summary="Update a todo",
    responses={
        200: {"description": "Todo updated successfully"},
        403: {"description": "View-only access"},
        404: {"description": "Todo or folder not found"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_todo(
    request: Request,
    todo_id: UUID,
    body: TodoUpdate,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
) -> TodoDetailResponse:
    """
    Update an existing todo. All fields are optional (partial update).

    Set `folder_id` to `null` to move the todo to the root.
    """
    folder_id = ... if "folder_id" not in body.model_fields_set else body.folder_id

    todo = await service.update(
        todo_id=todo_id,
        user_id=user.id,
        title=body.title,
        description=body.description,
        is_complete=body.is_complete,
        folder_id=folder_id,
    )
    return TodoDetailResponse(data=TodoResponse.from_entity(todo, user.id))


@router.post(
    "/bulk-update",
    response_model=TodoListResponse,
    summary="Update several todos",
    responses={
        200: {"description": "Todos updated"},
        403: {"description": "View-only access to at least one todo"},
        404: {"description": "At least one todo not found"},
    },
)
@limiter.limit(BULK_LIMIT)  # type: ignore[untyped-decorator]
async def bulk_update_todos(
    request: Request,
    body: TodoBulkUpdate,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
) -> TodoListResponse:
    """Set `is_complete` and/or `folder_id` on every listed todo, or on none."""
    folder_id = ... if "folder_id" not in body.model_fields_set else body.folder_id

    todos = await service.bulk_update(
        body.ids,
        user.id,
        is_complete=body.is_complete,
        folder_id=folder_id,
    )
    data = [TodoResponse.from_entity(t, user.id) for t in todos]
    return TodoListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/bulk-delete",
    response_model=BulkDeleteResponse,
    summary="Delete several todos",
    responses={
        200: {"description": "Todos deleted"},
        403: {"description": "Caller does not own at least one todo"},
        404: {"description": "At least one todo not found"},
    },
)
@limiter.limit(BULK_LIMIT)  # type: ignore[untyped-decorator]
async def bulk_delete_todos(
    request: Request,
    body: TodoBulkDelete,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
) -> BulkDeleteResponse:
    """Delete every listed todo, or none. Only the owner may delete."""
    deleted = await service.bulk_delete(body.ids, user.id)
    return BulkDeleteResponse(deleted_ids=deleted)


@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a todo",
    responses={
        204: {"description": "Todo deleted successfully"},
        403: {"description": "Caller is not the owner"},
        404: {"description": "Todo not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_todo(
    request: Request,
    todo_id: UUID,
    user: CurrentUser,
    service: TodoService = Depends(get_todo_service),
) -> None:
    """Delete a todo. Only the owner may delete."""
    await service.delete(todo_id, user.id)
    return None

