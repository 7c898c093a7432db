"""
TouristMap Backend: HTTP Route Tests
======================================

What:  Endpoint tests through HTTPX AsyncClient over ASGITransport, backed
       by a real SQLite store in tmp_path.

What we test:
    ✅ Each route's success response
    ✅ Error kind → status code mapping (400, 404, 409, 422, 503)
    ✅ Error body shape and X-Request-ID propagation
"""

import pytest

from app.exceptions import StorageUnavailableError

LOUVRE = {
    "type": "museum",
    "title": "Louvre",
    "description": "art museum",
    "x": 2.3376,
    "y": 48.8606,
}


async def _create_louvre(client):
    response = await client.post("/add_pin", json=LOUVRE)
    assert response.status_code == 200
    pins = (await client.get("/get_pins")).json()
    return pins[-1]["id"]


class TestPinRoutes:
    """Happy-path behavior of each route."""

    @pytest.mark.asyncio
    async def test_root_returns_ok(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.json() == "OK"

    @pytest.mark.asyncio
    async def test_add_pin(self, test_client):
        response = await test_client.post("/add_pin", json=LOUVRE)
        assert response.status_code == 200
        assert response.json() == {"message": "Pin added successfully."}

    @pytest.mark.asyncio
    async def test_get_pins_lists_all(self, test_client):
        await _create_louvre(test_client)
        response = await test_client.get("/get_pins")
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["title"] == "Louvre"
        assert body[0]["average_rate"] == 0
        assert set(body[0]) == {"id", "type", "title", "description", "x", "y", "average_rate"}

    @pytest.mark.asyncio
    async def test_get_pin(self, test_client):
        pin_id = await _create_louvre(test_client)
        response = await test_client.get(f"/get_pin/{pin_id}")
        assert response.status_code == 200
        assert response.json() == {"id": pin_id, **LOUVRE, "average_rate": 0.0}

    @pytest.mark.asyncio
    async def test_add_rate_updates_average(self, test_client):
        pin_id = await _create_louvre(test_client)
        for rate in (4, 2):
            response = await test_client.post("/add_rate", json={"point_id": pin_id, "rate": rate})
            assert response.status_code == 200
            assert response.json() == {"message": "Rating added successfully."}

        pin = (await test_client.get(f"/get_pin/{pin_id}")).json()
        assert pin["average_rate"] == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_delete_pin(self, test_client):
        pin_id = await _create_louvre(test_client)
        response = await test_client.delete(f"/delete_pin/{pin_id}")
        assert response.status_code == 204
        assert response.content == b""

        response = await test_client.get(f"/get_pin/{pin_id}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_pin_is_204(self, test_client):
        response = await test_client.delete("/delete_pin/424242")
        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"


class TestErrorMapping:
    """Storage error kinds surface with the right status and body."""

    @pytest.mark.asyncio
    async def test_long_title_is_400(self, test_client):
        response = await test_client.post("/add_pin", json={**LOUVRE, "title": "x" * 33})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "title"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_out_of_range_longitude_is_400(self, test_client):
        response = await test_client.post("/add_pin", json={**LOUVRE, "x": 200.0})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "x"

    @pytest.mark.asyncio
    async def test_invalid_rate_is_400(self, test_client):
        pin_id = await _create_louvre(test_client)
        response = await test_client.post("/add_rate", json={"point_id": pin_id, "rate": 6})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "rate"

    @pytest.mark.asyncio
    async def test_rating_missing_pin_is_409(self, test_client):
        response = await test_client.post("/add_rate", json={"point_id": 999, "rate": 3})
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "constraint_error"
        assert body["details"] == {"point_id": 999}

    @pytest.mark.asyncio
    async def test_unknown_pin_is_404(self, test_client):
        response = await test_client.get("/get_pin/31337")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_id_beyond_integer_range_is_404(self, test_client):
        response = await test_client.get(f"/get_pin/{2**63}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_id_beyond_integer_range_is_204(self, test_client):
        response = await test_client.delete(f"/delete_pin/{2**63}")
        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_rating_id_beyond_integer_range_is_409(self, test_client):
        response = await test_client.post("/add_rate", json={"point_id": 2**63, "rate": 3})
        assert response.status_code == 409
        assert response.json()["details"] == {"point_id": 2**63}

    @pytest.mark.asyncio
    async def test_malformed_body_is_422(self, test_client):
        response = await test_client.post("/add_pin", json={"title": "no coordinates"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_storage_unavailable_is_503(self, test_client, store, monkeypatch):
        async def unavailable():
            raise StorageUnavailableError(context={"operation": "get_all_pins"})

        monkeypatch.setattr(store, "get_all_pins", unavailable)
        response = await test_client.get("/get_pins")
        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "storage_unavailable"
        assert "details" not in body
        assert response.headers["Retry-After"] == "5"

    @pytest.mark.asyncio
    async def test_unhealthy_store_is_503(self, test_client, store, monkeypatch):
        async def down():
            return False

        monkeypatch.setattr(store, "health_check", down)
        response = await test_client.get("/health")
        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/get_pins", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_oversized_request_id_is_replaced(self, test_client):
        response = await test_client.get("/get_pins", headers={"X-Request-ID": "r" * 200})
        rid = response.headers["X-Request-ID"]
        assert rid != "r" * 200
        assert len(rid) == 8
