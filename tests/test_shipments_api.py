"""
Shipment endpoint tests — role gating, public tracking and the full
register → login → create → list flow over HTTP.
"""

import pytest
from httpx import AsyncClient

from app.core.enums import UserRole
from app.schemas.common import MAX_PAGE

BASE = "/api/v1/shipments"


async def _create(client: AsyncClient, headers: dict, payload: dict) -> dict:
    resp = await client.post(BASE, json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_end_to_end_register_login_create_list(async_client: AsyncClient, shipment_payload):
    resp = await async_client.post(
        "/api/v1/auth/register",
        json={
            "email": "buyer@example.com",
            "password": "buyer-pass",
            "first_name": "Bea",
            "last_name": "Buyer",
        },
    )
    assert resp.status_code == 201
    user_id = resp.json()["user"]["id"]
    assert resp.json()["user"]["role"] == "CUSTOMER"

    resp = await async_client.post(
        "/api/v1/auth/login",
        json={"email": "buyer@example.com", "password": "buyer-pass"},
    )
    assert resp.status_code == 200
    headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

    created = await _create(async_client, headers, shipment_payload())
    assert created["status"] == "PENDING"
    assert created["created_by"]["email"] == "buyer@example.com"

    resp = await async_client.get(BASE, params={"created_by_id": user_id}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] == 1
    assert body["data"][0]["id"] == created["id"]


@pytest.mark.asyncio
async def test_anonymous_list_is_unauthenticated(async_client: AsyncClient):
    resp = await async_client.get(BASE)

    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHENTICATED"
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_invalid_token_is_unauthenticated(async_client: AsyncClient):
    resp = await async_client.get(BASE, headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_customer_cannot_update_admin_can(
    async_client: AsyncClient, make_user, auth_headers, shipment_payload
):
    customer = await make_user(UserRole.CUSTOMER)
    admin = await make_user(UserRole.ADMIN)
    created = await _create(async_client, auth_headers(customer), shipment_payload())

    resp = await async_client.put(
        f"{BASE}/{created['id']}", json={"status": "IN_TRANSIT"}, headers=auth_headers(customer)
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"

    resp = await async_client.put(
        f"{BASE}/{created['id']}", json={"status": "IN_TRANSIT"}, headers=auth_headers(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "IN_TRANSIT"
    assert resp.json()["shipper_name"] == created["shipper_name"]


@pytest.mark.asyncio
async def test_driver_cannot_create(async_client: AsyncClient, make_user, auth_headers, shipment_payload):
    driver = await make_user(UserRole.DRIVER)

    resp = await async_client.post(BASE, json=shipment_payload(), headers=auth_headers(driver))

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_invalid_payload_is_rejected(async_client: AsyncClient, make_user, auth_headers, shipment_payload):
    customer = await make_user(UserRole.CUSTOMER)

    resp = await async_client.post(
        BASE, json=shipment_payload(weight=-1, vehicle_type="BICYCLE"), headers=auth_headers(customer)
    )

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_public_tracking(async_client: AsyncClient, make_user, auth_headers, shipment_payload):
    customer = await make_user(UserRole.CUSTOMER)
    created = await _create(async_client, auth_headers(customer), shipment_payload())

    resp = await async_client.get(f"{BASE}/track/{created['tracking_number']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]

    resp = await async_client.get(f"{BASE}/track/TMSUNKNOWN")
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_dispatcher_assigns_driver_and_flags(
    async_client: AsyncClient, make_user, auth_headers, shipment_payload
):
    dispatcher = await make_user(UserRole.DISPATCHER)
    driver = await make_user(UserRole.DRIVER)
    created = await _create(async_client, auth_headers(dispatcher), shipment_payload())

    resp = await async_client.post(
        f"{BASE}/{created['id']}/assign-driver",
        json={"driver_id": driver.id},
        headers=auth_headers(dispatcher),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "ASSIGNED"
    assert resp.json()["driver"]["id"] == driver.id

    resp = await async_client.post(f"{BASE}/{created['id']}/flag", headers=auth_headers(dispatcher))
    assert resp.status_code == 200
    assert "[FLAGGED FOR REVIEW - " in resp.json()["notes"]

    # Drivers may read but not flag
    resp = await async_client.post(f"{BASE}/{created['id']}/flag", headers=auth_headers(driver))
    assert resp.status_code == 403
    resp = await async_client.get(f"{BASE}/{created['id']}", headers=auth_headers(driver))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_only_admin_removes(async_client: AsyncClient, make_user, auth_headers, shipment_payload):
    dispatcher = await make_user(UserRole.DISPATCHER)
    admin = await make_user(UserRole.ADMIN)
    created = await _create(async_client, auth_headers(dispatcher), shipment_payload())

    resp = await async_client.delete(f"{BASE}/{created['id']}", headers=auth_headers(dispatcher))
    assert resp.status_code == 403

    resp = await async_client.delete(f"{BASE}/{created['id']}", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["tracking_number"] == created["tracking_number"]

    resp = await async_client.get(f"{BASE}/{created['id']}", headers=auth_headers(admin))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_pagination_and_bad_sort(async_client: AsyncClient, make_user, auth_headers, shipment_payload):
    admin = await make_user(UserRole.ADMIN)
    headers = auth_headers(admin)
    for i in range(3):
        await _create(async_client, headers, shipment_payload(consignee_city=f"City {i}"))

    resp = await async_client.get(BASE, params={"page": 2, "limit": 2}, headers=headers)
    assert resp.status_code == 200
    meta = resp.json()["meta"]
    assert meta["total"] == 3
    assert meta["total_pages"] == 2
    assert meta["has_previous_page"] is True
    assert meta["has_next_page"] is False
    assert len(resp.json()["data"]) == 1

    resp = await async_client.get(BASE, params={"sort_by": "hashedPassword"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_QUERY"


@pytest.mark.asyncio
async def test_out_of_range_page(async_client: AsyncClient, make_user, auth_headers):
    admin = await make_user(UserRole.ADMIN)
    headers = auth_headers(admin)

    resp = await async_client.get(BASE, params={"page": 10**18}, headers=headers)
    assert resp.status_code == 422

    resp = await async_client.get(BASE, params={"page": MAX_PAGE}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == []
    assert resp.json()["meta"]["has_previous_page"] is True
