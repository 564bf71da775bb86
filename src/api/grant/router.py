"""Grant CRUD endpoints."""

from uuid import UUID

from fastapi import APIRouter, Request

from src.api.core.decorators.auth import require_permission
from src.api.core.dependencies import CurrentUserAuthDep, GrantServiceDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.grant.schemas import (
    GrantCreateRequest,
    GrantListResponse,
    GrantModel,
    GrantResponse,
    GrantUpdateRequest,
)
from src.database.models import Permission

router = APIRouter(prefix="/grants", tags=["grants"])


@router.get("", response_model=GrantListResponse)
@require_permission(Permission.VIEW)
async def list_grants(
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantListResponse:
    """Non-deleted grants of the caller's organization (all of them for admins)."""
    grants = await grant_service.list_grants(current_user)
    return APIResponse.success(data=[GrantModel.model_validate(g) for g in grants])


@router.get("/deleted", response_model=GrantListResponse)
@require_permission(Permission.EDIT)
async def list_deleted_grants(
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantListResponse:
    grants = await grant_service.list_grants(current_user, deleted=True)
    return APIResponse.success(data=[GrantModel.model_validate(g) for g in grants])


@router.get("/{grant_id}", response_model=GrantResponse)
@require_permission(Permission.VIEW)
async def get_grant(
    grant_id: UUID,
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantResponse:
    grant = await grant_service.get_grant(current_user, grant_id)
    return APIResponse.success(data=GrantModel.model_validate(grant))


@router.post("", response_model=GrantResponse, status_code=201)
@require_permission(Permission.EDIT)
async def create_grant(
    request: Request,
    payload: GrantCreateRequest,
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantResponse:
    grant = await grant_service.create_grant(current_user, payload)
    return APIResponse.success(
        message_code=MessageCode.GRANT_CREATED, data=GrantModel.model_validate(grant)
    )


@router.patch("/{grant_id}", response_model=GrantResponse)
@require_permission(Permission.EDIT)
async def update_grant(
    request: Request,
    grant_id: UUID,
    payload: GrantUpdateRequest,
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantResponse:
    grant = await grant_service.update_grant(current_user, grant_id, payload)
    return APIResponse.success(
        message_code=MessageCode.GRANT_UPDATED, data=GrantModel.model_validate(grant)
    )


@router.delete("/{grant_id}", response_model=GrantResponse)
@require_permission(Permission.EDIT)
async def delete_grant(
    request: Request,
    grant_id: UUID,
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantResponse:
    """Soft delete: the grant moves to the deleted list and can be restored."""
    grant = await grant_service.delete_grant(current_user, grant_id)
    return APIResponse.success(
        message_code=MessageCode.GRANT_DELETED, data=GrantModel.model_validate(grant)
    )


@router.post("/{grant_id}/restore", response_model=GrantResponse)
@require_permission(Permission.EDIT)
async def restore_grant(
    request: Request,
    grant_id: UUID,
    current_user: CurrentUserAuthDep,
    grant_service: GrantServiceDep,
) -> GrantResponse:
    grant = await grant_service.restore_grant(current_user, grant_id)
    return APIResponse.success(
        message_code=MessageCode.GRANT_RESTORED, data=GrantModel.model_validate(grant)
    )
