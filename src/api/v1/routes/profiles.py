"""Profile API routes."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import InitializedUser, get_profile_service
from api.v1.schemas.profile import ProfileDetailResponse, ProfileResponse, ProfileUpdate
from core.rate_limit import limiter
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Get my profile",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """The caller's profile, created from the token on first use."""
    profile = await service.get_profile(user.id)
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.patch(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Update my profile",
    responses={
        200: {"description": "Profile updated"},
        422: {"description": "Unsupported language"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_my_profile(
    request: Request,
    body: ProfileUpdate,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    profile = await service.update_profile(user.id, **body.model_dump(exclude_unset=True))
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))
