"""Reconciles profile and role-record rows into a usable role set."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.constants import DEFAULT_DISPLAY_NAME
from src.core.base import BaseService
from src.database.models import Profile, Role
from src.modules.roles.definitions import DEFAULT_ROLES, roles_from_record
from src.modules.roles.records import RoleRecordService
from src.modules.user.profiles import ProfileService
from src.utils.settings.auth import AuthSettings


@dataclass(frozen=True)
class ResolvedRoles:
    roles: frozenset[Role]
    display_name: str


def display_name_from_email(email: str | None) -> str:
    if not email:
        return DEFAULT_DISPLAY_NAME
    local_part = email.split("@", 1)[0].strip()
    return local_part or DEFAULT_DISPLAY_NAME


class RoleResolver(BaseService):
    """
    Resolves the role set and display name of an authenticated user.

    The profile row is written by onboarding shortly after sign-up, so a
    missing profile is retried a few times before default rows are created.
    Resolution never raises: database failures degrade to viewer-only.
    """

    def __init__(
        self,
        db: AsyncSession,
        max_attempts: int | None = None,
        retry_delay_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        super().__init__(db)
        settings = AuthSettings()
        self.max_attempts = max(
            1,
            max_attempts
            if max_attempts is not None
            else settings.ROLE_RESOLUTION_MAX_ATTEMPTS,
        )
        self.retry_delay_seconds = (
            retry_delay_seconds
            if retry_delay_seconds is not None
            else settings.ROLE_RESOLUTION_RETRY_DELAY_SECONDS
        )
        self._sleep = sleep
        self.profiles = ProfileService(db)
        self.records = RoleRecordService(db)

    async def resolve(self, user_id: UUID, email: str | None) -> ResolvedRoles:
        try:
            profile = await self._fetch_profile_with_retry(user_id)
            if profile is None:
                return await self._fallback(user_id, email)

            display_name = profile.full_name or display_name_from_email(
                email or profile.email
            )
            roles = await self._fetch_roles(user_id)
            return ResolvedRoles(roles=roles, display_name=display_name)
        except Exception as e:
            self.logger.error(
                "Role resolution failed, using viewer",
                user_id=str(user_id),
                error=str(e),
            )
            return ResolvedRoles(roles=DEFAULT_ROLES, display_name=DEFAULT_DISPLAY_NAME)

    async def _fetch_profile_with_retry(self, user_id: UUID) -> Profile | None:
        for attempt in range(1, self.max_attempts + 1):
            try:
                profile = await self.profiles.get_profile(user_id)
            except SQLAlchemyError as e:
                self.logger.warning(
                    "Profile query failed",
                    user_id=str(user_id),
                    attempt=attempt,
                    error=str(e),
                )
                await self.db.rollback()
                profile = None

            if profile is not None:
                return profile

            if attempt < self.max_attempts:
                self.logger.debug(
                    "Profile not found yet, retrying",
                    user_id=str(user_id),
                    attempt=attempt,
                )
                await self._sleep(self.retry_delay_seconds)

        return None

    async def _fetch_roles(self, user_id: UUID) -> frozenset[Role]:
        try:
            record = await self.records.get_record(user_id)
            if record is None:
                record = await self.records.ensure_record(user_id)
                await self.db.commit()
            return roles_from_record(record)
        except SQLAlchemyError as e:
            self.logger.warning(
                "Role record query failed, using viewer",
                user_id=str(user_id),
                error=str(e),
            )
            await self.db.rollback()
            return DEFAULT_ROLES

    async def _fallback(self, user_id: UUID, email: str | None) -> ResolvedRoles:
        """Create default rows for a user whose profile never appeared."""
        display_name = display_name_from_email(email)
        try:
            await self.profiles.ensure_profile(user_id, email, display_name)
            await self.records.ensure_record(user_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            self.logger.error(
                "Could not create default profile",
                user_id=str(user_id),
                error=str(e),
            )
            await self.db.rollback()
            display_name = DEFAULT_DISPLAY_NAME

        self.logger.info(
            "Profile missing after retries, resolved as viewer",
            user_id=str(user_id),
            attempts=self.max_attempts,
        )
        return ResolvedRoles(roles=DEFAULT_ROLES, display_name=display_name)
