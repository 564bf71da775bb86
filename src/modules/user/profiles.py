from uuid import UUID

from sqlalchemy.exc import IntegrityError

from src.core.base import BaseService
from src.database.models import Profile


class ProfileService(BaseService):
    """Profile lookups and idempotent profile creation."""

    async def get_profile(self, user_id: UUID) -> Profile | None:
        return await self.db.get(Profile, user_id)

    async def ensure_profile(
        self, user_id: UUID, email: str | None, full_name: str | None
    ) -> Profile:
        """Create the profile unless it exists. Does not commit."""
        profile = await self.get_profile(user_id)
        if profile is not None:
            return profile

        profile = Profile(id=user_id, email=email, full_name=full_name)
        try:
            async with self.db.begin_nested():
                self.db.add(profile)
        except IntegrityError:
            self.logger.info(
                "Profile already created by another request", user_id=str(user_id)
            )
            existing = await self.db.get(Profile, user_id, populate_existing=True)
            if existing is None:
                raise
            profile = existing
        return profile
