import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_reports_database(client: AsyncClient):
    res = await client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["migrations"] in {"up_to_date", "pending", "unknown"}


@pytest.mark.asyncio
async def test_request_id_is_propagated(client: AsyncClient):
    res = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert res.headers["X-Request-ID"] == "req-123"

    res = await client.get("/health")
    assert res.headers["X-Request-ID"]
