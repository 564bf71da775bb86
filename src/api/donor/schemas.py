"""Donor request API schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.api.core.messages import APIResponse
from src.database.models import DonorRequestStatus

DonorStatusValue = Literal["none", "pending", "approved", "rejected"]


class DonorRequestModel(BaseModel):
    id: UUID
    user_id: UUID
    status: DonorRequestStatus
    requested_at: datetime
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class DonorStatusData(BaseModel):
    status: DonorStatusValue
    request: DonorRequestModel | None = None


class DonorRequestCreate(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)


DonorStatusResponse = APIResponse[DonorStatusData]
DonorRequestResponse = APIResponse[DonorRequestModel]
