"""Grant API schemas."""

from datetime import date, datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from src.api.core.messages import APIResponse
from src.database.models import GrantStatus

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class GrantModel(BaseModel):
    id: UUID
    name: str
    donor: str
    type: str
    category: str
    amount: float
    status: GrantStatus
    description: str | None = None
    applied_date: date | None = None
    deadline: date | None = None
    last_follow_up: date | None = None
    next_follow_up: date | None = None
    amount_awarded: float | None = None
    responsible_person: str | None = None
    progress_notes: str | None = None
    outcome_summary: str | None = None
    attachment_count: int = 0
    organization_id: UUID
    user_id: UUID
    created_by: UUID
    updated_by: UUID | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class GrantCreateRequest(BaseModel):
    name: RequiredText
    donor: RequiredText
    type: RequiredText
    category: RequiredText
    amount: float = Field(gt=0)
    status: GrantStatus = GrantStatus.DRAFT
    description: str | None = None
    applied_date: date | None = None
    deadline: date | None = None
    last_follow_up: date | None = None
    next_follow_up: date | None = None
    amount_awarded: float | None = Field(default=None, ge=0)
    responsible_person: str | None = None
    progress_notes: str | None = None
    outcome_summary: str | None = None
    attachment_count: int = Field(default=0, ge=0)
    # Only honoured for elevated callers; others always use their own organization
    organization_id: UUID | None = None

    model_config = ConfigDict(extra="forbid")


class GrantUpdateRequest(BaseModel):
    """Partial update; only the fields present in the body are applied."""

    name: RequiredText | None = None
    donor: RequiredText | None = None
    type: RequiredText | None = None
    category: RequiredText | None = None
    amount: float | None = Field(default=None, gt=0)
    status: GrantStatus | None = None
    description: str | None = None
    applied_date: date | None = None
    deadline: date | None = None
    last_follow_up: date | None = None
    next_follow_up: date | None = None
    amount_awarded: float | None = Field(default=None, ge=0)
    responsible_person: str | None = None
    progress_notes: str | None = None
    outcome_summary: str | None = None
    attachment_count: int | None = Field(default=None, ge=0)
    organization_id: UUID | None = None

    model_config = ConfigDict(extra="forbid")


# Columns that may not be cleared with an explicit null
NON_NULLABLE_UPDATE_FIELDS = frozenset(
    {"name", "donor", "type", "category", "amount", "status", "attachment_count"}
)

GrantResponse = APIResponse[GrantModel]
GrantListResponse = APIResponse[list[GrantModel]]
