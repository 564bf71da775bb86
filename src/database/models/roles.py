"""Role and permission models."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Role(str, Enum):
    # Declaration order is the canonical order used for fallbacks and display
    ADMIN = "admin"
    VIEWER = "viewer"
    CLERK = "clerk"
    DONOR = "donor"
    MEMBER = "member"


class Permission(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    ADMIN = "admin"


ROLE_PERMISSIONS = {
    Role.ADMIN: {Permission.VIEW, Permission.EDIT, Permission.ADMIN},
    Role.CLERK: {Permission.VIEW, Permission.EDIT},
    Role.DONOR: {Permission.VIEW, Permission.EDIT},
    Role.MEMBER: {Permission.VIEW, Permission.EDIT},
    Role.VIEWER: {Permission.VIEW},
}


def get_permissions_for_role(role: Role) -> set[Permission]:
    """Get all permissions for a given role."""
    return ROLE_PERMISSIONS.get(role, set())


class UserRolesRecord(Base):
    """One boolean column per role, keyed by Supabase user id."""

    __tablename__ = "user_roles_denorm"

    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_viewer: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_clerk: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_donor: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_member: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


FIRST_ADMIN_SLOT = 1


class FirstAdminClaim(Base):
    """Single-row table; inserting the row claims the first admin seat."""

    __tablename__ = "first_admin_claims"

    slot: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=FIRST_ADMIN_SLOT
    )
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
