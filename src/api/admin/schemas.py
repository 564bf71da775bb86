"""Admin API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.api.core.messages import APIResponse
from src.database.models import Role


class ManagedUserModel(BaseModel):
    id: UUID
    email: str
    full_name: str | None = None
    organization_id: UUID | None = None
    roles: list[Role]
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None


class UserRolesData(BaseModel):
    user_id: UUID
    roles: list[Role]


class AssignOrganizationRequest(BaseModel):
    user_id: UUID
    organization_name: str | None = Field(None, min_length=1, max_length=200)


class OrganizationModel(BaseModel):
    id: UUID
    name: str
    created_by: UUID | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AssignOrganizationData(BaseModel):
    organization: OrganizationModel
    created: bool


ManagedUserListResponse = APIResponse[list[ManagedUserModel]]
UserRolesResponse = APIResponse[UserRolesData]
AssignOrganizationResponse = APIResponse[AssignOrganizationData]
