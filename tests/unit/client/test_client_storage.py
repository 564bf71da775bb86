"""Tests for the active role stores."""

from uuid import uuid4

import pytest

from src.client.storage import (
    InMemoryActiveRoleStore,
    JsonFileActiveRoleStore,
    active_role_key,
)


def test_key_is_per_user():
    user_id = uuid4()

    assert active_role_key(user_id) == f"grant_tracker_active_role:{user_id}"


@pytest.mark.asyncio
async def test_in_memory_store():
    store = InMemoryActiveRoleStore()
    user_id = uuid4()

    assert await store.get(user_id) is None
    await store.set(user_id, "clerk")
    assert await store.get(user_id) == "clerk"
    await store.clear(user_id)
    assert await store.get(user_id) is None


@pytest.mark.asyncio
async def test_json_file_store_survives_reopen(tmp_path):
    path = tmp_path / "state" / "roles.json"
    alice, bob = uuid4(), uuid4()

    store = JsonFileActiveRoleStore(path)
    await store.set(alice, "admin")
    await store.set(bob, "viewer")

    reopened = JsonFileActiveRoleStore(path)
    assert await reopened.get(alice) == "admin"
    assert await reopened.get(bob) == "viewer"

    await reopened.clear(alice)
    assert await store.get(alice) is None
    assert await store.get(bob) == "viewer"


@pytest.mark.asyncio
async def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "roles.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileActiveRoleStore(path)
    user_id = uuid4()

    assert await store.get(user_id) is None

    await store.set(user_id, "donor")
    assert await store.get(user_id) == "donor"
