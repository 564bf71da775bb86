"""Database models for the Grant Tracker API."""

from .base import Base
from .donor_requests import DonorRequest, DonorRequestStatus
from .grants import Grant, GrantStatus
from .organizations import Organization
from .profiles import Profile
from .roles import (
    FIRST_ADMIN_SLOT,
    ROLE_PERMISSIONS,
    FirstAdminClaim,
    Permission,
    Role,
    UserRolesRecord,
    get_permissions_for_role,
)
from .sessions import AppSession

# Export all models and enums
__all__ = [
    # Base
    "Base",
    # Enums
    "Role",
    "Permission",
    "GrantStatus",
    "DonorRequestStatus",
    # Role helpers
    "ROLE_PERMISSIONS",
    "FIRST_ADMIN_SLOT",
    "get_permissions_for_role",
    # Models
    "Profile",
    "Organization",
    "UserRolesRecord",
    "FirstAdminClaim",
    "Grant",
    "AppSession",
    "DonorRequest",
]
