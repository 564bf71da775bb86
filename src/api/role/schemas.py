"""Role API schemas."""

from pydantic import BaseModel

from src.api.core.messages import APIResponse
from src.database.models import Permission, Role


class ResolvedRolesData(BaseModel):
    roles: list[Role]
    display_name: str
    highest_role: Role
    permissions: list[Permission]


class RoleDefinitionData(BaseModel):
    role: Role
    permissions: list[Permission]
    inherits: list[Role]


class RoleDefinitionsData(BaseModel):
    roles: list[RoleDefinitionData]
    all_permissions: list[Permission]


class ReplaceRolesRequest(BaseModel):
    # Unknown values are dropped; an empty result means viewer-only
    roles: list[str]


ResolvedRolesResponse = APIResponse[ResolvedRolesData]
RoleDefinitionsResponse = APIResponse[RoleDefinitionsData]
