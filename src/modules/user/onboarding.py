from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from src.core.base import BaseService
from src.core.context import AuthIdentity
from src.database.models import FIRST_ADMIN_SLOT, FirstAdminClaim, Profile, Role
from src.modules.roles.definitions import DEFAULT_ROLES, roles_from_record
from src.modules.roles.records import RoleRecordService
from src.modules.roles.resolver import display_name_from_email
from src.modules.user.profiles import ProfileService

FIRST_USER_ROLES = frozenset({Role.ADMIN, Role.VIEWER})


@dataclass(frozen=True)
class OnboardingResult:
    profile: Profile
    roles: frozenset[Role]
    created: bool


class UserOnboardingService(BaseService):
    """Creates the profile and role record of a newly signed-up user."""

    async def onboard(
        self, identity: AuthIdentity, full_name: str | None = None
    ) -> OnboardingResult:
        """
        Idempotent: a user that already has a role record keeps it.

        The very first user becomes admin. "First" needs both an empty
        role table and winning the single-row first-admin claim, so two
        simultaneous first sign-ups cannot both be promoted.
        """
        profiles = ProfileService(self.db)
        records = RoleRecordService(self.db)

        name = (
            full_name
            or identity.full_name
            or display_name_from_email(identity.email)
        )
        profile = await profiles.ensure_profile(identity.user_id, identity.email, name)
        if full_name and profile.full_name != full_name:
            profile.full_name = full_name

        existing = await records.get_record(identity.user_id)
        if existing is not None:
            await self.db.commit()
            return OnboardingResult(
                profile=profile, roles=roles_from_record(existing), created=False
            )

        roles = DEFAULT_ROLES
        if await records.count_records() == 0 and await self._claim_first_admin(
            identity
        ):
            roles = FIRST_USER_ROLES

        record = await records.ensure_record(identity.user_id, roles)
        await self.db.commit()
        await self.db.refresh(profile)

        resolved = roles_from_record(record)
        self.logger.info(
            "User onboarded",
            user_id=str(identity.user_id),
            roles=sorted(role.value for role in resolved),
        )
        return OnboardingResult(profile=profile, roles=resolved, created=True)

    async def _claim_first_admin(self, identity: AuthIdentity) -> bool:
        try:
            async with self.db.begin_nested():
                self.db.add(
                    FirstAdminClaim(slot=FIRST_ADMIN_SLOT, user_id=identity.user_id)
                )
        except IntegrityError:
            self.logger.info(
                "First admin already claimed", user_id=str(identity.user_id)
            )
            return False
        return True
