"""Administration endpoints, admin role only."""

from uuid import UUID

from fastapi import APIRouter, Request

from src.api.core.decorators.auth import require_role
from src.api.core.dependencies import (
    AuthAdminDep,
    CurrentUserAuthDep,
    OrganizationAssignmentServiceDep,
    UserManagementServiceDep,
)
from src.api.core.messages import APIResponse, MessageCode
from src.api.admin.schemas import (
    AssignOrganizationData,
    AssignOrganizationRequest,
    AssignOrganizationResponse,
    ManagedUserListResponse,
    ManagedUserModel,
    OrganizationModel,
    UserRolesData,
    UserRolesResponse,
)
from src.api.role.schemas import ReplaceRolesRequest
from src.database.models import Role
from src.modules.roles.definitions import normalize_roles, sort_roles

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=ManagedUserListResponse)
@require_role(Role.ADMIN)
async def list_users(
    request: Request,
    current_user: CurrentUserAuthDep,
    user_management: UserManagementServiceDep,
    auth_admin: AuthAdminDep,
) -> ManagedUserListResponse:
    """All auth-provider users with their local profile and roles."""
    users = await user_management.list_users(auth_admin)
    return APIResponse.success(
        data=[
            ManagedUserModel(
                id=user.auth_user.id,
                email=user.auth_user.email,
                full_name=(
                    user.profile.full_name if user.profile else user.auth_user.full_name
                ),
                organization_id=user.profile.organization_id if user.profile else None,
                roles=sort_roles(user.roles),
                created_at=user.auth_user.created_at,
                last_sign_in_at=user.auth_user.last_sign_in_at,
            )
            for user in users
        ]
    )


@router.put("/users/{user_id}/roles", response_model=UserRolesResponse)
@require_role(Role.ADMIN)
async def replace_user_roles(
    request: Request,
    user_id: UUID,
    payload: ReplaceRolesRequest,
    current_user: CurrentUserAuthDep,
    user_management: UserManagementServiceDep,
) -> UserRolesResponse:
    roles = await user_management.replace_roles(user_id, normalize_roles(payload.roles))
    return APIResponse.success(
        message_code=MessageCode.ROLES_UPDATED,
        data=UserRolesData(user_id=user_id, roles=sort_roles(roles)),
    )


@router.post("/organizations/assign", response_model=AssignOrganizationResponse)
@require_role(Role.ADMIN)
async def assign_organization(
    request: Request,
    payload: AssignOrganizationRequest,
    current_user: CurrentUserAuthDep,
    assignment_service: OrganizationAssignmentServiceDep,
) -> AssignOrganizationResponse:
    """Return the user's organization, creating one when they have none."""
    organization, created = await assignment_service.assign(
        payload.user_id, payload.organization_name, assigned_by=current_user.user_id
    )
    return APIResponse.success(
        message_code=MessageCode.ORGANIZATION_ASSIGNED,
        data=AssignOrganizationData(
            organization=OrganizationModel.model_validate(organization),
            created=created,
        ),
    )
