"""
Short-lived, server-side storage for an idea typed before sign-in.

The frontend posts the idea anonymously, keeps only the returned token across
the login redirect, then claims it once authenticated.  A token can be
claimed exactly once and expires after PENDING_IDEA_TTL_SECONDS.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import PendingIdeaError, PersistenceError
from app.models.database_models import PendingIdea

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def create_pending_idea(
    db: AsyncSession,
    idea: str,
    ttl_seconds: Optional[int] = None,
) -> PendingIdea:
    """Store *idea* under a fresh random token and return the row."""
    ttl = ttl_seconds if ttl_seconds is not None else settings.PENDING_IDEA_TTL_SECONDS
    pending = PendingIdea(
        token=secrets.token_urlsafe(32),
        idea=idea,
        expires_at=_utcnow() + timedelta(seconds=ttl),
    )
    try:
        db.add(pending)
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("create_pending_idea failed: %s", exc)
        raise PersistenceError("Failed to store pending idea") from exc

    logger.info("Stored pending idea (expires %s)", pending.expires_at.isoformat())
    return pending


async def claim_pending_idea(db: AsyncSession, token: str) -> str:
    """
    Return the idea stored under *token* and delete it.

    Raises PendingIdeaError if the token is unknown or expired.
    """
    try:
        result = await db.execute(select(PendingIdea).where(PendingIdea.token == token))
        pending = result.scalar_one_or_none()
        if pending is None:
            raise PendingIdeaError("Unknown pending idea token")

        idea = pending.idea
        expired = _as_utc(pending.expires_at) <= _utcnow()
        await db.delete(pending)
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("claim_pending_idea failed: %s", exc)
        raise PersistenceError("Failed to claim pending idea") from exc

    if expired:
        raise PendingIdeaError("Pending idea token has expired")

    logger.info("Claimed pending idea")
    return idea


async def purge_expired(db: AsyncSession) -> int:
    """Delete every expired pending idea; returns the number removed."""
    try:
        result = await db.execute(
            delete(PendingIdea).where(PendingIdea.expires_at <= _utcnow())
        )
    except SQLAlchemyError as exc:
        logger.error("purge_expired failed: %s", exc)
        raise PersistenceError("Failed to purge pending ideas") from exc
    return result.rowcount or 0
