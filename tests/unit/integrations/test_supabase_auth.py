"""Tests for the Supabase adapters, with the supabase client mocked."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.integrations.auth import AuthEvent
from src.integrations.supabase_auth import (
    ADMIN_PAGE_SIZE,
    SupabaseAdminBackend,
    SupabaseAuthBackend,
    to_auth_session,
    to_auth_user,
)
from src.utils.settings.auth import AuthSettings


def _user(**overrides):
    values = {
        "id": str(uuid4()),
        "email": "grace@example.org",
        "user_metadata": {"full_name": "Grace Hopper"},
        "created_at": None,
        "last_sign_in_at": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _session(user=None):
    return SimpleNamespace(
        access_token="access", refresh_token="refresh", expires_at=123, user=user or _user()
    )


def test_to_auth_user_reads_metadata_name():
    raw = _user(user_metadata={"name": "G. Hopper"})

    user = to_auth_user(raw)

    assert str(user.id) == raw.id
    assert user.full_name == "G. Hopper"


def test_to_auth_user_tolerates_missing_fields():
    user = to_auth_user(SimpleNamespace(id=str(uuid4())))

    assert user.email == ""
    assert user.full_name is None


def test_to_auth_session_requires_a_user():
    assert to_auth_session(None) is None
    assert to_auth_session(SimpleNamespace(access_token="x", user=None)) is None
    assert to_auth_session(_session()).access_token == "access"


@pytest.mark.asyncio
async def test_sign_up_passes_full_name_and_reports_pending_confirmation():
    client = MagicMock()
    client.auth.sign_up = AsyncMock(
        return_value=SimpleNamespace(user=_user(), session=None)
    )
    backend = SupabaseAuthBackend(client)

    outcome = await backend.sign_up("grace@example.org", "pw", "Grace Hopper")

    credentials = client.auth.sign_up.await_args.args[0]
    assert credentials["options"] == {"data": {"full_name": "Grace Hopper"}}
    assert outcome.session is None
    assert outcome.user.email == "grace@example.org"


@pytest.mark.asyncio
async def test_sign_in_normalizes_session():
    client = MagicMock()
    client.auth.sign_in_with_password = AsyncMock(
        return_value=SimpleNamespace(session=_session(), user=None)
    )

    session = await SupabaseAuthBackend(client).sign_in_with_password("a@b.org", "pw")

    assert session.access_token == "access"
    assert session.user.full_name == "Grace Hopper"


def test_listener_receives_normalized_events():
    client = MagicMock()
    subscription = SimpleNamespace(unsubscribe=MagicMock())
    client.auth.on_auth_state_change = MagicMock(return_value=subscription)
    received = []

    unsubscribe = SupabaseAuthBackend(client).on_auth_state_change(
        lambda event, session: received.append((event, session))
    )
    callback = client.auth.on_auth_state_change.call_args.args[0]
    callback("SIGNED_OUT", None)
    callback("MFA_CHALLENGE_VERIFIED", None)
    callback(SimpleNamespace(value="TOKEN_REFRESHED"), _session())

    assert [event for event, _ in received] == [
        AuthEvent.SIGNED_OUT,
        AuthEvent.TOKEN_REFRESHED,
    ]
    assert received[1][1].access_token == "access"
    unsubscribe()
    subscription.unsubscribe.assert_called_once()


@pytest.mark.asyncio
async def test_admin_listing_pages_until_short_batch():
    client = MagicMock()
    first_page = [_user(email=f"u{i}@example.org") for i in range(ADMIN_PAGE_SIZE)]
    client.auth.admin.list_users = AsyncMock(side_effect=[first_page, [_user()]])

    users = await SupabaseAdminBackend(client).list_users()

    assert len(users) == ADMIN_PAGE_SIZE + 1
    assert client.auth.admin.list_users.await_count == 2


@pytest.mark.asyncio
async def test_admin_backend_disabled_without_service_key():
    settings = AuthSettings(SUPABASE_URL="", SUPABASE_SERVICE_ROLE_KEY="")

    assert await SupabaseAdminBackend.from_settings(settings) is None
