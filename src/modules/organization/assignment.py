import time
from uuid import UUID

from fastapi import status

from src.api.core.constants import DEFAULT_ORGANIZATION_NAME_PREFIX
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import Organization
from src.modules.user.profiles import ProfileService


def default_organization_name() -> str:
    return f"{DEFAULT_ORGANIZATION_NAME_PREFIX}{int(time.time() * 1000)}"


class OrganizationAssignmentService(BaseService):
    async def assign(
        self,
        user_id: UUID,
        organization_name: str | None = None,
        assigned_by: UUID | None = None,
    ) -> tuple[Organization, bool]:
        """Return the user's organization, creating one if they have none.

        Returns:
            (organization, created)
        """
        profile = await ProfileService(self.db).get_profile(user_id)
        if profile is None:
            raise GrantTrackerException(
                MessageCode.USER_NOT_FOUND,
                status.HTTP_404_NOT_FOUND,
                {"user_id": str(user_id)},
            )

        if profile.organization_id is not None:
            organization = await self.db.get(Organization, profile.organization_id)
            if organization is not None:
                return organization, False
            self.logger.warning(
                "Profile points at a missing organization",
                user_id=str(user_id),
                organization_id=str(profile.organization_id),
            )

        organization = Organization(
            name=organization_name or default_organization_name(),
            created_by=assigned_by or user_id,
        )
        self.db.add(organization)
        await self.db.flush()

        profile.organization_id = organization.id
        await self._commit_and_refresh(organization)

        self.logger.info(
            "Organization assigned",
            user_id=str(user_id),
            organization_id=str(organization.id),
        )
        return organization, True
