"""Role domain router."""

from fastapi import APIRouter

from src.api.core.dependencies import CurrentIdentityDep, RoleResolverDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.role.schemas import (
    ResolvedRolesData,
    ResolvedRolesResponse,
    RoleDefinitionData,
    RoleDefinitionsData,
    RoleDefinitionsResponse,
)
from src.database.models import Permission, get_permissions_for_role
from src.modules.roles.definitions import (
    ROLE_INHERITANCE,
    ROLE_ORDER,
    highest_role,
    sort_roles,
)

router = APIRouter(prefix="/roles", tags=["roles"])


def _sorted_permissions(permissions) -> list[Permission]:
    return [p for p in Permission if p in permissions]


@router.get("/me", response_model=ResolvedRolesResponse)
async def get_my_roles(
    identity: CurrentIdentityDep,
    resolver: RoleResolverDep,
) -> ResolvedRolesResponse:
    """Resolve the caller's roles, creating default rows when missing."""
    resolved = await resolver.resolve(identity.user_id, identity.email)

    permissions = set()
    for role in resolved.roles:
        permissions |= get_permissions_for_role(role)

    return APIResponse.success(
        message_code=MessageCode.ROLES_RESOLVED,
        data=ResolvedRolesData(
            roles=sort_roles(resolved.roles),
            display_name=resolved.display_name,
            highest_role=highest_role(resolved.roles),
            permissions=_sorted_permissions(permissions),
        ),
    )


@router.get("/definitions", response_model=RoleDefinitionsResponse)
async def list_role_definitions(identity: CurrentIdentityDep) -> RoleDefinitionsResponse:
    """List all available roles and their permissions (static definitions)."""
    return APIResponse.success(
        data=RoleDefinitionsData(
            roles=[
                RoleDefinitionData(
                    role=role,
                    permissions=_sorted_permissions(get_permissions_for_role(role)),
                    inherits=sort_roles(ROLE_INHERITANCE[role] - {role}),
                )
                for role in ROLE_ORDER
            ],
            all_permissions=list(Permission),
        )
    )
