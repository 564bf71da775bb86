"""Global test configuration and fixtures for the Grant Tracker API."""

import os

# Settings are read at import time; point everything at test values first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-key-for-testing-only"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""
os.environ["ROLE_RESOLUTION_RETRY_DELAY_SECONDS"] = "0"
os.environ["ENVIRONMENT"] = "TEST"

from collections.abc import AsyncGenerator, Iterable
from dataclasses import dataclass
from typing import Callable
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.core.constants import JWT_ALGORITHM
from src.client.api import GrantTrackerClient
from src.client.auth_context import AuthContext
from src.client.notifications import Notifier
from src.core.context import AuthenticatedUserContext, AuthIdentity
from src.database.models import Base, Organization, Profile, Role
from src.modules.roles.definitions import record_flags
from src.redis.client import get_redis_client
from src.utils.settings.auth import AuthSettings
from tests.factories import (
    OrganizationFactory,
    ProfileFactory,
    UserRolesRecordFactory,
)
from tests.utils.fake_auth import FakeAuthAdmin, FakeAuthBackend

BASE_URL = "http://test-grant-tracker-api"


@pytest_asyncio.fixture
async def async_engine():
    """In-memory SQLite shared by the test and the app through one connection."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_auth_admin() -> FakeAuthAdmin:
    return FakeAuthAdmin()


async def _no_redis():
    return None


@pytest_asyncio.fixture
async def app(session_factory, fake_auth_admin) -> AsyncGenerator[FastAPI, None]:
    """FastAPI application wired to the test database, without Redis."""
    from src.main import app

    async with LifespanManager(app):
        app.state.session_factory = session_factory
        app.state.auth_admin = fake_auth_admin
        app.dependency_overrides[get_redis_client] = _no_redis
        try:
            yield app
        finally:
            app.dependency_overrides.clear()


# JWT Token Fixtures
@pytest.fixture()
def jwt_token_factory() -> Callable[..., str]:
    """Factory for creating Supabase-style access tokens."""
    auth_settings = AuthSettings()

    def create_token(
        user_id: str, email: str, name: str = "Test User", role: str = "authenticated"
    ) -> str:
        payload = {
            "sub": user_id,
            "email": email,
            "role": role,
            "aud": "authenticated",
            "user_metadata": {"full_name": name, "email_verified": True},
            "app_metadata": {"provider": "email", "providers": ["email"]},
            "is_anonymous": role == "anon",
        }
        return jwt.encode(payload, auth_settings.SUPABASE_JWT_SECRET, algorithm=JWT_ALGORITHM)

    return create_token


@dataclass
class TestUser:
    __test__ = False

    id: UUID
    email: str
    full_name: str
    token: str
    roles: frozenset[Role]
    profile: Profile | None

    @property
    def identity(self) -> AuthIdentity:
        return AuthIdentity(user_id=self.id, email=self.email, full_name=self.full_name)

    @property
    def context(self) -> AuthenticatedUserContext:
        return AuthenticatedUserContext(
            identity=self.identity, roles=self.roles, profile=self.profile
        )


@pytest.fixture
def create_user(db_session: AsyncSession, jwt_token_factory):
    """Create a profile plus role record and mint a token for it."""

    async def _create(
        roles: Iterable[Role] = (Role.VIEWER,),
        organization: Organization | None = None,
        email: str | None = None,
        full_name: str = "Test User",
        with_profile: bool = True,
        with_roles: bool = True,
    ) -> TestUser:
        user_id = uuid4()
        email = email or f"user-{user_id.hex[:8]}@example.org"
        roles = frozenset(roles)

        profile = None
        if with_profile:
            profile = await ProfileFactory.create_async(
                db_session,
                id=user_id,
                email=email,
                full_name=full_name,
                organization_id=organization.id if organization else None,
            )
        if with_roles:
            await UserRolesRecordFactory.create_async(
                db_session, user_id=user_id, **record_flags(roles)
            )

        return TestUser(
            id=user_id,
            email=email,
            full_name=full_name,
            token=jwt_token_factory(str(user_id), email, full_name),
            roles=roles or frozenset({Role.VIEWER}),
            profile=profile,
        )

    return _create


# Test Data Fixtures
@pytest_asyncio.fixture
async def test_organization(db_session: AsyncSession) -> Organization:
    return await OrganizationFactory.create_async(db_session, name="Test Foundation")


@pytest_asyncio.fixture
async def other_organization(db_session: AsyncSession) -> Organization:
    return await OrganizationFactory.create_async(db_session, name="Other Foundation")


@pytest_asyncio.fixture
async def admin_user(create_user, test_organization) -> TestUser:
    return await create_user(
        roles={Role.ADMIN, Role.VIEWER},
        organization=test_organization,
        full_name="Admin User",
    )


@pytest_asyncio.fixture
async def clerk_user(create_user, test_organization) -> TestUser:
    return await create_user(
        roles={Role.CLERK}, organization=test_organization, full_name="Clerk User"
    )


@pytest_asyncio.fixture
async def viewer_user(create_user, test_organization) -> TestUser:
    return await create_user(
        roles={Role.VIEWER}, organization=test_organization, full_name="Viewer User"
    )


# HTTP Client Fixtures
@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client without credentials."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


@pytest_asyncio.fixture
async def client_factory(app: FastAPI):
    """Create HTTP clients authorized as a given user; closed after the test."""
    clients: list[AsyncClient] = []

    def create_client_for_user(user: TestUser | None = None) -> AsyncClient:
        headers = {"Authorization": f"Bearer {user.token}"} if user else {}
        client = AsyncClient(
            transport=ASGITransport(app=app), base_url=BASE_URL, headers=headers
        )
        clients.append(client)
        return client

    yield create_client_for_user

    for client in clients:
        await client.aclose()


@pytest.fixture
def admin_client(client_factory, admin_user) -> AsyncClient:
    return client_factory(admin_user)


@pytest.fixture
def clerk_client(client_factory, clerk_user) -> AsyncClient:
    return client_factory(clerk_user)


@pytest.fixture
def viewer_client(client_factory, viewer_user) -> AsyncClient:
    return client_factory(viewer_user)


@pytest.fixture
def fake_auth_backend(jwt_token_factory) -> FakeAuthBackend:
    return FakeAuthBackend(jwt_token_factory)


# Client SDK Fixtures
@pytest_asyncio.fixture
async def sdk_http_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


@pytest.fixture
def sdk_api(sdk_http_client: AsyncClient) -> GrantTrackerClient:
    return GrantTrackerClient(sdk_http_client)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest_asyncio.fixture
async def auth_context(
    fake_auth_backend, sdk_api, notifier
) -> AsyncGenerator[AuthContext, None]:
    context = AuthContext(fake_auth_backend, sdk_api, notifier=notifier)
    yield context
    context.close()
