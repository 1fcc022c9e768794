"""Tests for GET /api/health and the root info route."""
import pytest
from httpx import AsyncClient

from app.config import settings


@pytest.mark.asyncio
async def test_health_checks_database(client: AsyncClient):
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["database"] == "ok"
    assert data["gemini"] in ("ok", "not_configured")
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_is_healthy_with_key(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    data = (await client.get("/api/health/")).json()
    assert data["gemini"] == "ok"
    assert data["status"] == "healthy"


@pytest.mark.parametrize("key", [None, "", "   "])
@pytest.mark.asyncio
async def test_health_is_degraded_without_key(client: AsyncClient, monkeypatch, key):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", key)
    data = (await client.get("/api/health/")).json()
    assert data["gemini"] == "not_configured"
    assert data["status"] == "degraded"


@pytest.mark.asyncio
async def test_root_lists_endpoints(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "PRD Forge API"
    assert data["endpoints"]["generate"] == "/api/generate-prd"


@pytest.mark.asyncio
async def test_process_time_header(client: AsyncClient):
    resp = await client.get("/")
    assert resp.headers["x-process-time"].endswith("ms")
