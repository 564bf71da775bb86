"""Tests for the grant endpoints."""

from uuid import uuid4

import pytest

from src.api.core.messages import MessageCode
from src.database.models import Grant, Role
from tests.factories import GrantFactory
from tests.utils.assertions import (
    assert_error_response,
    assert_not_found_error,
    assert_success_response,
    assert_validation_error,
)

GRANT_PAYLOAD = {
    "name": "Clean Water Initiative",
    "donor": "River Fund",
    "type": "Government",
    "category": "Health",
    "amount": 50000,
    "deadline": "2026-12-31",
}


@pytest.mark.asyncio
async def test_clerk_creates_grant(clerk_client, clerk_user, test_organization):
    response = await clerk_client.post("/v1/grants", json=GRANT_PAYLOAD)

    data = assert_success_response(response, MessageCode.GRANT_CREATED, 201)
    assert data["name"] == "Clean Water Initiative"
    assert data["organization_id"] == str(test_organization.id)
    assert data["created_by"] == str(clerk_user.id)
    assert data["status"] == "Draft"
    assert data["deadline"] == "2026-12-31"
    assert data["deleted_at"] is None


@pytest.mark.asyncio
async def test_viewer_cannot_create(viewer_client):
    response = await viewer_client.post("/v1/grants", json=GRANT_PAYLOAD)

    assert_error_response(response, MessageCode.AUTH_INSUFFICIENT_ROLE_PERMISSIONS, 403)


@pytest.mark.asyncio
async def test_viewer_can_list(viewer_client, db_session, test_organization):
    await GrantFactory.create_async(db_session, organization_id=test_organization.id)

    response = await viewer_client.get("/v1/grants")

    data = assert_success_response(response)
    assert len(data) == 1


@pytest.mark.asyncio
async def test_create_validates_required_fields(clerk_client):
    payload = {**GRANT_PAYLOAD, "name": "   "}
    payload.pop("donor")

    response = await clerk_client.post("/v1/grants", json=payload)

    assert_validation_error(response, {"donor": "missing", "name": "string_too_short"})


@pytest.mark.asyncio
async def test_create_rejects_non_positive_amount(clerk_client):
    response = await clerk_client.post("/v1/grants", json={**GRANT_PAYLOAD, "amount": 0})

    assert_validation_error(response, {"amount": "greater_than"})


@pytest.mark.asyncio
async def test_create_rejects_unknown_fields(clerk_client):
    response = await clerk_client.post(
        "/v1/grants", json={**GRANT_PAYLOAD, "secret": "x"}
    )

    assert_validation_error(response, {"secret": "extra_forbidden"})


@pytest.mark.asyncio
async def test_list_hides_other_organizations(
    clerk_client, db_session, test_organization, other_organization
):
    own = await GrantFactory.create_async(db_session, organization_id=test_organization.id)
    await GrantFactory.create_async(db_session, organization_id=other_organization.id)

    response = await clerk_client.get("/v1/grants")

    data = assert_success_response(response)
    assert [grant["id"] for grant in data] == [str(own.id)]


@pytest.mark.asyncio
async def test_get_grant_from_other_organization_is_not_found(
    clerk_client, db_session, other_organization
):
    foreign = await GrantFactory.create_async(
        db_session, organization_id=other_organization.id
    )

    response = await clerk_client.get(f"/v1/grants/{foreign.id}")

    assert_not_found_error(response, "grant")


@pytest.mark.asyncio
async def test_patch_updates_fields(clerk_client, db_session, test_organization):
    grant = await GrantFactory.create_async(db_session, organization_id=test_organization.id)

    response = await clerk_client.patch(
        f"/v1/grants/{grant.id}", json={"status": "Approved", "amount_awarded": 900}
    )

    data = assert_success_response(response, MessageCode.GRANT_UPDATED)
    assert data["status"] == "Approved"
    assert data["amount_awarded"] == 900
    assert data["name"] == grant.name


@pytest.mark.asyncio
async def test_patch_cannot_move_grant(
    admin_client, db_session, test_organization, other_organization
):
    grant = await GrantFactory.create_async(db_session, organization_id=test_organization.id)

    response = await admin_client.patch(
        f"/v1/grants/{grant.id}", json={"organization_id": str(other_organization.id)}
    )

    assert_error_response(response, MessageCode.GRANT_ORGANIZATION_IMMUTABLE, 400)


@pytest.mark.asyncio
async def test_patch_cannot_null_required_field(clerk_client, db_session, test_organization):
    grant = await GrantFactory.create_async(db_session, organization_id=test_organization.id)

    response = await clerk_client.patch(f"/v1/grants/{grant.id}", json={"name": None})

    assert_error_response(response, MessageCode.INVALID_INPUT, 422)


@pytest.mark.asyncio
async def test_delete_is_soft_and_restorable(
    clerk_client, db_session, session_factory, test_organization
):
    grant = await GrantFactory.create_async(db_session, organization_id=test_organization.id)

    deleted = await clerk_client.delete(f"/v1/grants/{grant.id}")
    data = assert_success_response(deleted, MessageCode.GRANT_DELETED)
    assert data["deleted_at"] is not None

    listed = await clerk_client.get("/v1/grants")
    assert assert_success_response(listed) == []

    trash = await clerk_client.get("/v1/grants/deleted")
    assert [g["id"] for g in assert_success_response(trash)] == [str(grant.id)]

    async with session_factory() as fresh:
        assert await fresh.get(Grant, grant.id) is not None

    restored = await clerk_client.post(f"/v1/grants/{grant.id}/restore")
    data = assert_success_response(restored, MessageCode.GRANT_RESTORED)
    assert data["deleted_at"] is None

    listed = await clerk_client.get("/v1/grants")
    assert [g["id"] for g in assert_success_response(listed)] == [str(grant.id)]


@pytest.mark.asyncio
async def test_viewer_cannot_see_deleted_list(viewer_client):
    response = await viewer_client.get("/v1/grants/deleted")

    assert_error_response(response, MessageCode.AUTH_INSUFFICIENT_ROLE_PERMISSIONS, 403)


@pytest.mark.asyncio
async def test_unknown_grant(clerk_client):
    response = await clerk_client.delete(f"/v1/grants/{uuid4()}")

    assert_not_found_error(response, "grant")


@pytest.mark.asyncio
async def test_user_without_organization_cannot_create(client_factory, create_user):
    user = await create_user(roles={Role.CLERK})

    response = await client_factory(user).post("/v1/grants", json=GRANT_PAYLOAD)

    assert_error_response(response, MessageCode.ORGANIZATION_REQUIRED, 403)
