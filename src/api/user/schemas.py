from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.api.core.messages import APIResponse
from src.database.models import Role


class ProfileModel(BaseModel):
    id: UUID
    email: str | None = None
    full_name: str | None = None
    organization_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OnboardRequest(BaseModel):
    full_name: str | None = Field(None, max_length=200)


class OnboardData(BaseModel):
    profile: ProfileModel
    roles: list[Role]
    created: bool


class ProfileUpdateRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=200)


OnboardResponse = APIResponse[OnboardData]
ProfileResponse = APIResponse[ProfileModel]
