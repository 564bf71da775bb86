"""Authentication context models for typed user authentication."""

from dataclasses import dataclass, field
from uuid import UUID

from src.database.models import Permission, Profile, Role
from src.modules.roles.definitions import has_permission, has_role, is_elevated


@dataclass(frozen=True)
class AuthIdentity:
    """Identity carried by a verified Supabase access token."""

    user_id: UUID
    email: str
    full_name: str | None = None


@dataclass
class AuthenticatedUserContext:
    """Verified identity plus the caller's stored roles and profile."""

    identity: AuthIdentity
    roles: frozenset[Role] = field(default_factory=lambda: frozenset({Role.VIEWER}))
    profile: Profile | None = None

    def __post_init__(self):
        if not self.identity:
            raise ValueError("Identity is required in authentication context")
        if not self.roles:
            raise ValueError("Authentication context needs at least one role")

    @property
    def user_id(self) -> UUID:
        return self.identity.user_id

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def organization_id(self) -> UUID | None:
        return self.profile.organization_id if self.profile else None

    @property
    def is_elevated(self) -> bool:
        return is_elevated(self.roles)

    def has_role(self, required: Role) -> bool:
        return has_role(self.roles, required)

    def can(self, permission: Permission) -> bool:
        return has_permission(self.roles, permission)
