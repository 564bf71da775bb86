"""Donor request workflow endpoints."""

from fastapi import APIRouter, Request

from src.api.core.decorators.rate_limit import rate_limit
from src.api.core.dependencies import (
    CurrentUserAuthDep,
    DonorRequestServiceDep,
    RedisClientDep,
)
from src.api.core.messages import APIResponse, MessageCode
from src.api.donor.schemas import (
    DonorRequestCreate,
    DonorRequestModel,
    DonorRequestResponse,
    DonorStatusData,
    DonorStatusResponse,
)
from src.utils.settings.app import AppSettings

router = APIRouter(prefix="/api/donor", tags=["donor"])


@router.get("", response_model=DonorStatusResponse)
async def get_donor_status(
    current_user: CurrentUserAuthDep,
    donor_service: DonorRequestServiceDep,
) -> DonorStatusResponse:
    status_value, donor_request = await donor_service.get_status(current_user)
    return APIResponse.success(
        data=DonorStatusData(
            status=status_value,
            request=(
                DonorRequestModel.model_validate(donor_request)
                if donor_request
                else None
            ),
        )
    )


@router.post("", response_model=DonorRequestResponse)
@rate_limit(
    lambda: AppSettings().DONOR_REQUEST_RATE_LIMIT,
    lambda: AppSettings().DONOR_REQUEST_RATE_WINDOW_SECONDS,
    scope="donor",
)
async def create_donor_request(
    request: Request,
    current_user: CurrentUserAuthDep,
    donor_service: DonorRequestServiceDep,
    redis_client: RedisClientDep,
    payload: DonorRequestCreate | None = None,
) -> DonorRequestResponse:
    """Ask to become a donor. Approval happens elsewhere."""
    donor_request = await donor_service.submit(
        current_user, payload.notes if payload else None
    )
    return APIResponse.success(
        message_code=MessageCode.DONOR_REQUEST_CREATED,
        data=DonorRequestModel.model_validate(donor_request),
    )
