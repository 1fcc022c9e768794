"""
Idea helpers for the landing page.

Route summary
-------------
GET    /api/ideas/random                      — one sample startup idea
POST   /api/pending-ideas                     — park an idea before sign-in
POST   /api/pending-ideas/{token}/claim       — retrieve it once signed in
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies.auth import get_current_user_id
from app.exceptions import PendingIdeaError
from app.models.schemas import (
    PendingIdeaClaimResponse,
    PendingIdeaCreateRequest,
    PendingIdeaResponse,
    RandomIdeaResponse,
)
from app.services import pending_ideas
from app.services.random_ideas import random_idea

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ideas/random", response_model=RandomIdeaResponse)
async def get_random_idea() -> RandomIdeaResponse:
    return RandomIdeaResponse(idea=random_idea())


@router.post(
    "/pending-ideas",
    response_model=PendingIdeaResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_pending_idea(
    body: PendingIdeaCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> PendingIdeaResponse:
    """
    Store an idea typed by an anonymous visitor.

    The returned token is the only thing the client keeps across the login
    redirect; the idea itself stays on the server.
    """
    if len(body.idea) > settings.MAX_IDEA_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Idea is too long (max {settings.MAX_IDEA_LENGTH} characters).",
        )

    purged = await pending_ideas.purge_expired(db)
    if purged:
        logger.info("Purged %d expired pending idea(s)", purged)

    pending = await pending_ideas.create_pending_idea(db, body.idea)
    return PendingIdeaResponse(token=pending.token, expires_at=pending.expires_at)


@router.post("/pending-ideas/{token}/claim", response_model=PendingIdeaClaimResponse)
async def claim_pending_idea(
    token: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> PendingIdeaClaimResponse:
    """Return the parked idea to a signed-in user.  Each token works once."""
    try:
        idea = await pending_ideas.claim_pending_idea(db, token)
    except PendingIdeaError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    logger.info("Pending idea claimed by user=%s", user_id)
    return PendingIdeaClaimResponse(idea=idea)
