"""Tests for GET /api/health and the root endpoint."""
import pytest
from httpx import AsyncClient

from gapscope.main import app
from gapscope.services.narrative import get_narrative_service
from tests.conftest import FailingNarrativeService


@pytest.mark.asyncio
async def test_health_returns_200(client: AsyncClient):
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["narrative_service"] == "ok"
    assert "corpus" in data


@pytest.mark.asyncio
async def test_health_degraded_without_narrative_service(client: AsyncClient):
    app.dependency_overrides[get_narrative_service] = FailingNarrativeService
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["narrative_service"] == "error"


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "gapscope API"
    assert resp.headers["X-Process-Time"].endswith("ms")
