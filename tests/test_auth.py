"""Tests for authentication boundaries.

Verifies that PRD endpoints require X-User-Id and that
users cannot access other users' PRDs.
"""
import pytest
from httpx import AsyncClient

from tests.conftest import AUTH_HEADERS, AUTH_HEADERS_USER2, sample_prd_json


async def _create_prd(client: AsyncClient) -> str:
    resp = await client.post(
        "/api/prds",
        json={"content": sample_prd_json()},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    return resp.json()["id"]


@pytest.mark.asyncio
async def test_prds_requires_auth_header(client: AsyncClient):
    """GET /api/prds without X-User-Id should return 422 (missing required header)."""
    resp = await client.get("/api/prds")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_prd_requires_auth_header(client: AsyncClient):
    """POST /api/prds without X-User-Id should return 422."""
    resp = await client.post("/api/prds", json={"content": sample_prd_json()})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_wrong_user_cannot_access_prd(client: AsyncClient):
    """User 2 should get 404 when accessing user 1's PRD."""
    prd_id = await _create_prd(client)

    resp = await client.get(f"/api/prds/{prd_id}", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_wrong_user_cannot_modify_prd(client: AsyncClient):
    """User 2 should get 404 for update, delete and export of user 1's PRD."""
    prd_id = await _create_prd(client)

    resp = await client.put(
        f"/api/prds/{prd_id}", json={"title": "Mine now"}, headers=AUTH_HEADERS_USER2
    )
    assert resp.status_code == 404

    resp = await client.delete(f"/api/prds/{prd_id}", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404

    resp = await client.get(f"/api/prds/{prd_id}/export.md", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404

    resp = await client.get(f"/api/prds/{prd_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["title"] == "PlantPal"


@pytest.mark.asyncio
async def test_nonexistent_prd_returns_404(client: AsyncClient):
    """Accessing a non-existent PRD ID should return 404."""
    resp = await client.get("/api/prds/does-not-exist", headers=AUTH_HEADERS)
    assert resp.status_code == 404
