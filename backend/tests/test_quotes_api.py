"""Tests for quote submission and admin triage."""

import pytest
from httpx import AsyncClient

from shiptrack.config import settings


def _quote(**overrides) -> dict:
    body = {
        "name": "Efua Boateng",
        "email": "Efua@Example.com",
        "phone": "+233 (20) 123-4567",
        "service_type": "express",
        "origin": "Accra",
        "destination": "Lagos",
        "weight": 18.0,
        "message": "Two boxes of textiles",
    }
    body.update(overrides)
    return body


async def _submit(client: AsyncClient, **overrides) -> str:
    response = await client.post("/api/quotes", json=_quote(**overrides))
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.api
@pytest.mark.asyncio
class TestSubmitQuote:

    async def test_submit_starts_pending(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/quotes", json=_quote())

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert set(data) == {"id", "status", "created_at"}

        listing = await client.get("/api/quotes", headers=admin_headers)
        stored = listing.json()["items"][0]
        assert stored["email"] == "efua@example.com"
        assert stored["phone"] == "+233201234567"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"phone": "call me"},
            {"service_type": "teleport"},
            {"weight": -3},
            {"message": "<script>alert(1)</script>"},
        ],
    )
    async def test_rejects_bad_input(self, client: AsyncClient, overrides):
        response = await client.post("/api/quotes", json=_quote(**overrides))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    async def test_submissions_are_rate_limited(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "quote_rate_limit", 2)

        codes = [(await client.post("/api/quotes", json=_quote())).status_code for _ in range(3)]

        assert codes == [201, 201, 429]


@pytest.mark.api
@pytest.mark.asyncio
class TestQuoteAdmin:

    async def test_list_requires_admin(self, client: AsyncClient, viewer_headers):
        assert (await client.get("/api/quotes")).status_code == 401
        assert (await client.get("/api/quotes", headers=viewer_headers)).status_code == 403

    async def test_list_filters_by_status(self, client: AsyncClient, admin_headers):
        first = await _submit(client)
        await _submit(client, name="Yaw Asante")
        await client.patch(f"/api/quotes/{first}", json={"status": "contacted"}, headers=admin_headers)

        pending = await client.get("/api/quotes?status=pending", headers=admin_headers)
        contacted = await client.get("/api/quotes?status=contacted", headers=admin_headers)

        assert pending.json()["total"] == 1
        assert [q["id"] for q in contacted.json()["items"]] == [first]

    async def test_patch_status(self, client: AsyncClient, admin_headers):
        quote_id = await _submit(client)

        response = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "contacted"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "contacted"

    async def test_patch_invalid_status(self, client: AsyncClient, admin_headers):
        quote_id = await _submit(client)

        response = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "delivered"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_STATUS"

    async def test_patch_requires_admin(self, client: AsyncClient, viewer_headers):
        quote_id = await _submit(client)

        anonymous = await client.patch(f"/api/quotes/{quote_id}", json={"status": "contacted"})
        viewer = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "contacted"}, headers=viewer_headers
        )

        assert anonymous.status_code == 401
        assert viewer.status_code == 403

    async def test_patch_unknown(self, client: AsyncClient, admin_headers):
        response = await client.patch(
            "/api/quotes/nope", json={"status": "contacted"}, headers=admin_headers
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "QUOTE_NOT_FOUND"

    async def test_any_order_by_default(self, client: AsyncClient, admin_headers):
        quote_id = await _submit(client)

        done = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "completed"}, headers=admin_headers
        )
        back = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "pending"}, headers=admin_headers
        )

        assert done.status_code == 200
        assert back.status_code == 200

    async def test_forward_only_mode(self, client: AsyncClient, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "quote_forward_only", True)
        quote_id = await _submit(client)

        skip = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "completed"}, headers=admin_headers
        )
        step = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "contacted"}, headers=admin_headers
        )
        same = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "contacted"}, headers=admin_headers
        )
        back = await client.patch(
            f"/api/quotes/{quote_id}", json={"status": "pending"}, headers=admin_headers
        )

        assert skip.status_code == 409
        assert step.status_code == 200
        assert same.status_code == 200
        assert back.status_code == 409

    async def test_delete(self, client: AsyncClient, admin_headers, viewer_headers):
        quote_id = await _submit(client)

        denied = await client.delete(f"/api/quotes/{quote_id}", headers=viewer_headers)
        deleted = await client.delete(f"/api/quotes/{quote_id}", headers=admin_headers)
        again = await client.delete(f"/api/quotes/{quote_id}", headers=admin_headers)

        assert denied.status_code == 403
        assert deleted.status_code == 204
        assert again.status_code == 404
