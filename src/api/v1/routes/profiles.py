"""Profile routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_profile_service
from api.v1.schemas.profile import ProfileListResponse, ProfileResponse
from core.rate_limit import READ_LIMIT, limiter
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "",
    response_model=ProfileListResponse,
    summary="List users to share with",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profiles(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
    limit: int | None = Query(None, ge=1, le=100),
) -> ProfileListResponse:
    """List every user except the caller, ordered by email."""
    profiles = await service.list_share_candidates(user.id, limit)
    return ProfileListResponse(data=[ProfileResponse.model_validate(p) for p in profiles])
