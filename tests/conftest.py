"""
Shared fixtures for PRD Forge backend tests.

Integration tests run against a throwaway SQLite file (aiosqlite driver) so
no database server is needed; point TEST_DATABASE_URL at a Postgres test DB
to run them against asyncpg instead.  Each test function gets its own
session and all tables are emptied afterwards.
"""
from __future__ import annotations

import os
import tempfile
from typing import Any, AsyncGenerator, Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Override DATABASE_URL *before* any app module is imported, so that
# settings.DATABASE_URL and the global engine point at the test DB.
_TMP_DIR = tempfile.mkdtemp(prefix="prdforge-tests-")
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'prdforge_test.db')}",
)
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import database_models  # noqa: E402,F401

# Table names in dependency order (children first) for cleanup
_ALL_TABLES = [
    "pending_ideas",
    "prds",
    "users",
]


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a DB session for each test. After the test, all tables are emptied
    so each test starts with a clean slate.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    # Ensure tables exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # Empty all tables after the test
    async with engine.begin() as conn:
        for table in _ALL_TABLES:
            await conn.execute(text(f"DELETE FROM {table}"))

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB dependency
    overridden to use the per-test session.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

AUTH_HEADERS = {
    "X-User-Id": "test-user-1",
    "X-User-Email": "test1@example.com",
    "X-User-Name": "Test User 1",
}

AUTH_HEADERS_USER2 = {
    "X-User-Id": "test-user-2",
    "X-User-Email": "test2@example.com",
    "X-User-Name": "Test User 2",
}


def sample_prd_json(name: str = "PlantPal") -> Dict[str, Any]:
    """A complete, valid PRD content object."""
    return {
        "startup_name": name,
        "overview": {
            "idea_summary": "Personalized plant care kits delivered monthly",
            "problem_statement": "Houseplant owners kill their plants through guesswork",
            "solution": "Care kits tuned to the exact plants you own",
            "target_audience": ["Urban renters", "First-time plant owners"],
        },
        "features": {
            "core_features": ["Plant identification", "Care schedule"],
            "user_roles": {
                "guest": "Browse sample kits",
                "registered": "Manage plants and reminders",
                "premium": "Monthly kit delivery",
            },
            "monetization_model": ["Monthly subscription", "One-off kits"],
        },
        "tech_stack": {
            "frontend": "Next.js",
            "backend": "Python, FastAPI",
            "database": "PostgreSQL",
            "auth": "OAuth 2.0",
        },
        "ai_integration": {
            "model": "Gemini vision",
            "features": ["Plant identification from photos"],
        },
        "ui_ux_design": {
            "style": "Calm, green, minimal",
            "key_elements": ["Plant cards", "Watering calendar"],
        },
        "deployment": {
            "hosting": "Vercel",
            "scalability": ["Stateless API", "CDN for images"],
        },
        "roadmap": {
            "mvp": "Identification and reminders",
            "ui_ux": "Onboarding polish",
            "ai_integration": "Photo diagnosis",
            "monetization": "Subscription boxes",
            "launch": "Public launch in Q3",
        },
    }


def gemini_envelope(text_payload: str) -> Dict[str, Any]:
    """Wrap *text_payload* the way generateContent returns it."""
    return {"candidates": [{"content": {"parts": [{"text": text_payload}]}}]}


class StubGeminiClient:
    """Stands in for GeminiClient: returns canned replies or raises."""

    def __init__(self, replies: List[Any]) -> None:
        self.replies = list(replies)
        self.prompts: List[str] = []

    def is_configured(self) -> bool:
        return True

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def prd_json() -> Dict[str, Any]:
    return sample_prd_json()
