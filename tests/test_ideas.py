"""Tests for random ideas and pending (pre-login) ideas."""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.services import pending_ideas
from app.services.random_ideas import STARTUP_IDEAS
from tests.conftest import AUTH_HEADERS


@pytest.mark.asyncio
async def test_random_idea(client: AsyncClient):
    resp = await client.get("/api/ideas/random")
    assert resp.status_code == 200
    assert resp.json()["idea"] in STARTUP_IDEAS


def test_sample_ideas_are_distinct():
    assert len(STARTUP_IDEAS) == 30
    assert len(set(STARTUP_IDEAS)) == len(STARTUP_IDEAS)


@pytest.mark.asyncio
async def test_pending_idea_claimed_once(client: AsyncClient):
    resp = await client.post("/api/pending-ideas", json={"idea": "  a tool for dog walkers  "})
    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    assert data["expires_at"]

    resp = await client.post(f"/api/pending-ideas/{data['token']}/claim", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"idea": "a tool for dog walkers"}

    resp = await client.post(f"/api/pending-ideas/{data['token']}/claim", headers=AUTH_HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_claim_requires_auth_header(client: AsyncClient):
    resp = await client.post("/api/pending-ideas", json={"idea": "something"})
    token = resp.json()["token"]

    resp = await client.post(f"/api/pending-ideas/{token}/claim")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_unknown_token_returns_404(client: AsyncClient):
    resp = await client.post("/api/pending-ideas/not-a-token/claim", headers=AUTH_HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_expired_token_returns_404(client: AsyncClient, db_session: AsyncSession):
    pending = await pending_ideas.create_pending_idea(db_session, "stale idea", ttl_seconds=-60)

    resp = await client.post(f"/api/pending-ideas/{pending.token}/claim", headers=AUTH_HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_purge_expired(db_session: AsyncSession):
    await pending_ideas.create_pending_idea(db_session, "old", ttl_seconds=-60)
    fresh = await pending_ideas.create_pending_idea(db_session, "new")

    assert await pending_ideas.purge_expired(db_session) == 1
    assert await pending_ideas.claim_pending_idea(db_session, fresh.token) == "new"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"idea": ""}, {"idea": "   "}])
async def test_blank_pending_idea_is_rejected(client: AsyncClient, payload):
    resp = await client.post("/api/pending-ideas", json=payload)
    assert resp.status_code == 422
