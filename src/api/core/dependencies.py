from typing import Annotated, AsyncGenerator

import redis.asyncio as redis
from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.core.context import AuthenticatedUserContext, AuthIdentity
from src.integrations.auth import AuthAdminBackend
from src.modules.donor.service import DonorRequestService
from src.modules.grants.service import GrantService
from src.modules.organization.assignment import OrganizationAssignmentService
from src.modules.roles.records import RoleRecordService
from src.modules.roles.resolver import RoleResolver
from src.modules.session.bridge import SessionBridgeService
from src.modules.user.management import UserManagementService
from src.modules.user.onboarding import UserOnboardingService
from src.modules.user.profiles import ProfileService
from src.redis.client import get_redis_client


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
RedisClientDep = Annotated[redis.Redis | None, Depends(get_redis_client)]


async def get_session_bridge_service(db: AsyncSessionDep) -> SessionBridgeService:
    return SessionBridgeService(db)


async def get_role_resolver(db: AsyncSessionDep) -> RoleResolver:
    return RoleResolver(db)


async def get_grant_service(db: AsyncSessionDep) -> GrantService:
    return GrantService(db)


async def get_donor_request_service(db: AsyncSessionDep) -> DonorRequestService:
    return DonorRequestService(db)


async def get_user_onboarding_service(db: AsyncSessionDep) -> UserOnboardingService:
    return UserOnboardingService(db)


async def get_user_management_service(db: AsyncSessionDep) -> UserManagementService:
    return UserManagementService(db)


async def get_organization_assignment_service(
    db: AsyncSessionDep,
) -> OrganizationAssignmentService:
    return OrganizationAssignmentService(db)


async def get_profile_service(db: AsyncSessionDep) -> ProfileService:
    return ProfileService(db)


async def get_auth_admin(request: Request) -> AuthAdminBackend:
    """Service-role auth backend created in the app lifespan."""
    auth_admin = getattr(request.app.state, "auth_admin", None)
    if auth_admin is None:
        raise GrantTrackerException(
            MessageCode.EXTERNAL_SERVICE_ERROR,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            {"description": "Supabase service role is not configured"},
        )
    return auth_admin


async def get_current_identity(request: Request) -> AuthIdentity:
    """Identity set by the auth middleware from the bearer token."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise GrantTrackerException(MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED)
    return identity


async def get_current_user_authenticated(
    db: AsyncSessionDep,
    identity: Annotated[AuthIdentity, Depends(get_current_identity)],
) -> AuthenticatedUserContext:
    """Caller identity with stored roles and profile.

    Reads only; users without a role record are treated as viewers.
    """
    profile = await ProfileService(db).get_profile(identity.user_id)
    roles = await RoleRecordService(db).get_roles(identity.user_id)
    return AuthenticatedUserContext(identity=identity, roles=roles, profile=profile)


SessionBridgeServiceDep = Annotated[
    SessionBridgeService, Depends(get_session_bridge_service)
]
RoleResolverDep = Annotated[RoleResolver, Depends(get_role_resolver)]
GrantServiceDep = Annotated[GrantService, Depends(get_grant_service)]
DonorRequestServiceDep = Annotated[
    DonorRequestService, Depends(get_donor_request_service)
]
UserOnboardingServiceDep = Annotated[
    UserOnboardingService, Depends(get_user_onboarding_service)
]
UserManagementServiceDep = Annotated[
    UserManagementService, Depends(get_user_management_service)
]
OrganizationAssignmentServiceDep = Annotated[
    OrganizationAssignmentService, Depends(get_organization_assignment_service)
]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
AuthAdminDep = Annotated[AuthAdminBackend, Depends(get_auth_admin)]

CurrentIdentityDep = Annotated[AuthIdentity, Depends(get_current_identity)]
CurrentUserAuthDep = Annotated[
    AuthenticatedUserContext, Depends(get_current_user_authenticated)
]
