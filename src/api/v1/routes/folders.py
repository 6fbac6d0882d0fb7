"""Folder API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_folder_service
from api.v1.schemas.folder import (
    FolderCreate,
    FolderDeleteResponse,
    FolderDetailResponse,
    FolderListResponse,
    FolderResponse,
    FolderShareRequest,
    FolderUpdate,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.folder_service import FolderService

router = APIRouter(prefix="/folders", tags=["folders"])


@router.get(
    "",
    response_model=FolderListResponse,
    summary="List visible folders",
    responses={200: {"description": "Owned folders followed by folders shared with the caller"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_folders(
    request: Request,
    user: CurrentUser,
    service: FolderService = Depends(get_folder_service),
) -> FolderListResponse:
    """Get every folder the caller owns or that has been shared with them."""
    folders = await service.get_visible_for_user(user.id)
    return FolderListResponse(
        data=[FolderResponse.from_entity(f, user.id) for f in folders],
        meta={"total": len(folders)},
    )


@router.get(
    "/{folder_id}",
    response_model=FolderDetailResponse,
    summary="Get a folder",
    responses={404: {"description": "Folder not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_folder(
    request: Request,
    folder_id: UUID,
    user: CurrentUser,
    service: FolderService = Depends(get_folder_service),
) -> FolderDetailResponse:
    """Get a specific folder the caller can view."""
    folder = await service.get_by_id(folder_id, user.id)
    return FolderDetailResponse(data=FolderResponse.from_entity(folder, user.id))


@router.post(
    "",
    response_model=FolderDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a folder",
    responses={422: {"description": "Validation error"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_folder(
    request: Request,
    body: FolderCreate,
    user: CurrentUser,
    service: FolderService = Depends(get_folder_service),
) -> FolderDetailResponse:
    """Create an unshared folder owned by the caller."""
    folder = await service.create(user.id, body.name, body.description)
    return FolderDetailResponse(data=FolderResponse.from_entity(folder, user.id))


@router.patch(
    "/{folder_id}",
    response_model=FolderDetailResponse,
    summary="Update a folder",
    responses={
        403: {"description": "View-only access"},
        404: {"description": "Folder not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_folder(
    request: Request,
    folder_id: UUID,
    body: FolderUpdate,
    user: CurrentUser,
    service: FolderService = Depends(get_folder_service),
) -> FolderDetailResponse:
    """Rename or re-describe a folder. Requires edit access."""
    folder = await service.update(folder_id, user.id, body.name, body.description)
    return FolderDetailResponse(data=FolderResponse.from_entity(folder, user.id))


@router.delete(
    "/{folder_id}",
    response_model=FolderDeleteResponse,
    summary="Delete a folder",
    responses={
        403: {"description": "Caller is not the owner"},
        404: {"description": "Folder not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_folder(
    request: Request,
    folder_id: UUID,
    user: CurrentUser,
    service: FolderService = Depends(get_folder_service),
) -> FolderDeleteResponse:
    """
    Delete a folder. Its todos are moved to the root first and keep their
    sharing lists.
    """
    detached = await service.delete(folder_id, user.id)
    return FolderDeleteResponse(detached_todo_ids=detached)


@router.post(
    "/{folder_id}/share",
    response_model=FolderDetailResponse,
    summary="Share a folder",
    responses={
        400: {"description": "Cannot share with the owner"},
        403: {"description": "Caller is not the owner"},
        404: {"description": "Folder not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def share_folder(
    request: Request,
    folder_id: UUID,
    body: FolderShareRequest,
    user: CurrentUser,
    service: FolderService = Depends(get_folder_service),
) -> FolderDetailResponse:
    """
    Share a folder with another user at `view`, `edit` or `manage` level.

    Every todo in the folder receives the folder's resulting `shared_with`
    and `can_edit` lists.
    """
    folder = await service.share(folder_id, user.id, body.user_id, body.permission)
    return FolderDetailResponse(data=FolderResponse.from_entity(folder, user.id))

