"""User endpoints: onboarding and own profile."""

from fastapi import APIRouter, status

from src.api.core.dependencies import (
    AsyncSessionDep,
    CurrentIdentityDep,
    ProfileServiceDep,
    UserOnboardingServiceDep,
)
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import APIResponse, MessageCode
from src.api.user.schemas import (
    OnboardData,
    OnboardRequest,
    OnboardResponse,
    ProfileModel,
    ProfileResponse,
    ProfileUpdateRequest,
)
from src.modules.roles.definitions import sort_roles
from src.utils.dates import utc_now

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/onboard", response_model=OnboardResponse)
async def onboard_user(
    identity: CurrentIdentityDep,
    onboarding_service: UserOnboardingServiceDep,
    payload: OnboardRequest | None = None,
) -> OnboardResponse:
    """Create the caller's profile and role record; safe to call repeatedly."""
    result = await onboarding_service.onboard(
        identity, payload.full_name if payload else None
    )
    return APIResponse.success(
        message_code=MessageCode.USER_ONBOARDED,
        data=OnboardData(
            profile=ProfileModel.model_validate(result.profile),
            roles=sort_roles(result.roles),
            created=result.created,
        ),
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    identity: CurrentIdentityDep,
    profile_service: ProfileServiceDep,
) -> ProfileResponse:
    profile = await profile_service.get_profile(identity.user_id)
    if profile is None:
        raise GrantTrackerException(
            MessageCode.USER_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            {"description": "Profile not created yet, call /v1/users/onboard"},
        )
    return APIResponse.success(data=ProfileModel.model_validate(profile))


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    payload: ProfileUpdateRequest,
    identity: CurrentIdentityDep,
    profile_service: ProfileServiceDep,
    db: AsyncSessionDep,
) -> ProfileResponse:
    profile = await profile_service.get_profile(identity.user_id)
    if profile is None:
        raise GrantTrackerException(MessageCode.USER_NOT_FOUND, status.HTTP_404_NOT_FOUND)

    profile.full_name = payload.full_name
    profile.updated_at = utc_now()
    await db.commit()
    await db.refresh(profile)

    return APIResponse.success(
        message_code=MessageCode.UPDATED, data=ProfileModel.model_validate(profile)
    )
