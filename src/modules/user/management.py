"""User listing and role administration."""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select

from src.core.base import BaseService
from src.database.models import Profile, Role, UserRolesRecord
from src.integrations.auth import AuthAdminBackend, AuthUser
from src.modules.roles.definitions import roles_from_record
from src.modules.roles.records import RoleRecordService


@dataclass(frozen=True)
class ManagedUser:
    auth_user: AuthUser
    profile: Profile | None
    roles: frozenset[Role]


class UserManagementService(BaseService):
    async def list_users(self, auth_admin: AuthAdminBackend) -> list[ManagedUser]:
        """Every identity known to the auth provider, with local profile and roles."""
        auth_users = await auth_admin.list_users()
        user_ids = [user.id for user in auth_users]
        if not user_ids:
            return []

        profiles = {
            profile.id: profile
            for profile in (
                await self.db.execute(select(Profile).where(Profile.id.in_(user_ids)))
            ).scalars()
        }
        records = {
            record.user_id: record
            for record in (
                await self.db.execute(
                    select(UserRolesRecord).where(UserRolesRecord.user_id.in_(user_ids))
                )
            ).scalars()
        }

        return [
            ManagedUser(
                auth_user=user,
                profile=profiles.get(user.id),
                roles=roles_from_record(records.get(user.id)),
            )
            for user in auth_users
        ]

    async def replace_roles(self, user_id: UUID, roles: Iterable[Role]) -> frozenset[Role]:
        record = await RoleRecordService(self.db).set_roles(user_id, roles)
        await self.db.commit()
        return roles_from_record(record)
