"""HTTP endpoint tests: health and read-only log queries."""

import pytest
from httpx import AsyncClient

from auditchain.main import create_app


async def _restock(audit, inventory_id: str = "inv-1", supplier: str = "supplier-1"):
    return await audit.inventory.log_movement({
        "inventory_id": inventory_id,
        "user_id": supplier,
        "movement_type": "restock",
        "quantity": 50,
        "previous_quantity": 100,
        "new_quantity": 150,
    })


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:
    async def test_liveness(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_readiness_reports_mirror(self, client: AsyncClient):
        resp = await client.get("/health/ready")
        body = resp.json()

        assert resp.status_code == 200
        assert body["checks"]["store"] == "ok"
        assert body["mirror"]["running"] is True
        assert body["mirror"]["workers"] == 2

    async def test_uninitialised_service(self):
        from httpx import ASGITransport

        app = create_app()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/health/ready")
        assert resp.status_code == 503


@pytest.mark.api
@pytest.mark.asyncio
class TestLogsApi:
    async def test_list_uses_wire_names(self, client: AsyncClient, audit):
        await _restock(audit)
        await audit.dispatcher.join()

        resp = await client.get("/api/logs")
        body = resp.json()

        assert resp.status_code == 200
        assert body["total"] == 1
        [item] = body["items"]
        assert item["entityType"] == "inventory"
        assert item["performedBy"] == "supplier-1"
        assert item["txHash"]
        assert item["blockNumber"] == 1

    async def test_list_filters(self, client: AsyncClient, audit):
        await _restock(audit)
        await _restock(audit, inventory_id="inv-2", supplier="supplier-2")
        await audit.product.log_product({
            "type": "product_created", "product_id": "p-1", "action": "Created",
        })

        resp = await client.get("/api/logs", params={"entity_type": "inventory", "performed_by": "supplier-2"})
        assert resp.json()["total"] == 1

        resp = await client.get("/api/logs", params={"types": "product_created,inventory_restocked"})
        assert resp.json()["total"] == 3

        resp = await client.get("/api/logs", params={"limit": 1, "offset": 1})
        body = resp.json()
        assert (body["total"], len(body["items"]), body["offset"]) == (3, 1, 1)

    async def test_bad_query_params(self, client: AsyncClient):
        assert (await client.get("/api/logs", params={"entity_type": "spaceship"})).status_code == 422
        resp = await client.get("/api/logs", params={"limit": 0})
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert any("limit" in e["field"] for e in error["details"]["errors"])

    async def test_get_by_id(self, client: AsyncClient, audit):
        result = await _restock(audit)

        resp = await client.get(f"/api/logs/{result.entry.id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == result.entry.id

    async def test_get_missing(self, client: AsyncClient):
        resp = await client.get("/api/logs/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "LOG_NOT_FOUND"

    async def test_entity_and_movement_routes(self, client: AsyncClient, audit):
        await _restock(audit)
        await audit.inventory.log_quality_check({
            "inventory_id": "inv-1", "inspection_result": "passed", "checked_quantity": 5,
        })

        entity = (await client.get("/api/logs/entity/inventory/inv-1")).json()
        movements = (await client.get("/api/logs/inventory/inv-1/movements")).json()
        checks = (await client.get("/api/logs/inventory/inv-1/quality-checks")).json()
        supplier = (await client.get("/api/logs/suppliers/supplier-1")).json()

        assert entity["total"] == 2
        assert [i["type"] for i in movements["items"]] == ["inventory_restocked"]
        assert [i["type"] for i in checks["items"]] == ["inventory_quality_check"]
        assert supplier["total"] == 1

    async def test_recipient_route(self, client: AsyncClient, audit):
        await audit.notification.log_read({"notification_id": "n-1", "user_id": "u-1"})
        body = (await client.get("/api/logs/recipients/u-1")).json()
        assert body["items"][0]["type"] == "notification_read"

    async def test_dead_letters(self, client: AsyncClient, audit):
        assert (await client.get("/api/logs/mirror/dead-letters")).json() == []

        await audit.dispatcher.stop()
        result = await _restock(audit)

        [dead] = (await client.get("/api/logs/mirror/dead-letters")).json()
        assert dead["logId"] == result.entry.id
        assert dead["reason"] == "dispatcher stopped"
        assert dead["payload"]["entityId"] == "inv-1"

    async def test_no_write_endpoint(self, client: AsyncClient):
        resp = await client.post("/api/logs", json={"type": "x"})
        assert resp.status_code == 405
