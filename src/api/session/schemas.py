"""Application session API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.api.core.messages import APIResponse


class SessionCreateRequest(BaseModel):
    user_id: UUID | None = None
    persistent: bool = False


class SessionTokenData(BaseModel):
    token: str
    expires_at: datetime


class SessionModel(BaseModel):
    id: UUID
    user_id: UUID
    persistent: bool
    revoked: bool
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


SessionCreateResponse = APIResponse[SessionTokenData]
SessionResponse = APIResponse[SessionModel]
SessionRevokeResponse = APIResponse[bool]
