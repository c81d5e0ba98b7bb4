"""Smoke tests for health and app wiring."""

from unittest.mock import AsyncMock

from httpx import AsyncClient

from app.infrastructure.persistence.database import get_db
from app.main import app


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/health returns 200, status ok and the app version."""
    response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version")


async def test_health_carries_request_id_and_security_headers(client: AsyncClient) -> None:
    response = await client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["x-request-id"] == "abc-123"
    assert response.headers["x-content-type-options"] == "nosniff"


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/api/health", headers={"X-Request-ID": "bad id\twith spaces"})
    assert response.headers["x-request-id"] != "bad id\twith spaces"


async def test_readiness_ok_when_database_answers(client: AsyncClient) -> None:
    session = AsyncMock()

    async def _db():
        yield session

    app.dependency_overrides[get_db] = _db
    response = await client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    session.execute.assert_awaited_once()


async def test_readiness_503_when_database_unreachable(client: AsyncClient) -> None:
    session = AsyncMock()
    session.execute.side_effect = OSError("connection refused")

    async def _db():
        yield session

    app.dependency_overrides[get_db] = _db
    response = await client.get("/api/health/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
