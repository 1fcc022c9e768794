"""
Persistence for PRD documents.

Thin async CRUD over the ``prds`` table.  Every query is scoped by owner.
SQLAlchemy failures are re-raised as PersistenceError; the ``get_db``
dependency rolls the session back so no partial state is committed.

``description`` is written on insert only.  ``markdown`` is always rendered
from the content being stored, never taken from the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import PersistenceError
from app.models.database_models import PRD
from app.models.schemas import PRDContent, PRDDocument
from app.services.renderer import render_markdown

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled PRD"
TITLE_MAX_LENGTH = 255  # prds.title is String(255)


def to_document(prd: PRD) -> PRDDocument:
    """Detach an ORM row into the pipeline's PRDDocument."""
    return PRDDocument.model_validate(prd)


def _default_title(content: PRDContent) -> str:
    name = (content.startup_name or "").strip()
    return name[:TITLE_MAX_LENGTH].rstrip() or DEFAULT_TITLE


async def create_prd(
    db: AsyncSession,
    user_id: str,
    content: PRDContent,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> PRD:
    """
    Insert a new PRD owned by *user_id*.

    Title defaults to the startup name; description defaults to the
    overview's idea summary.
    """
    json_data = content.to_json_dict()
    prd = PRD(
        user_id=user_id,
        title=(title or "").strip() or _default_title(content),
        description=description if description is not None else content.overview.idea_summary,
        markdown=render_markdown(content),
        json_data=json_data,
    )
    try:
        db.add(prd)
        await db.flush()
        await db.refresh(prd)
    except SQLAlchemyError as exc:
        logger.error("create_prd failed for user=%s: %s", user_id, exc)
        raise PersistenceError("Failed to save PRD") from exc

    logger.info("Created PRD id=%s title=%r for user=%s", prd.id, prd.title, user_id)
    return prd


async def get_prd(db: AsyncSession, prd_id: str, user_id: str) -> Optional[PRD]:
    """Return the PRD if it exists and belongs to *user_id*, else None."""
    try:
        result = await db.execute(
            select(PRD).where(PRD.id == prd_id, PRD.user_id == user_id)
        )
    except SQLAlchemyError as exc:
        logger.error("get_prd failed for id=%s: %s", prd_id, exc)
        raise PersistenceError("Failed to load PRD") from exc
    return result.scalar_one_or_none()


async def list_user_prds(db: AsyncSession, user_id: str) -> List[PRD]:
    """All PRDs of *user_id*, newest first."""
    try:
        result = await db.execute(
            select(PRD)
            .where(PRD.user_id == user_id)
            .order_by(PRD.created_at.desc())
        )
    except SQLAlchemyError as exc:
        logger.error("list_user_prds failed for user=%s: %s", user_id, exc)
        raise PersistenceError("Failed to list PRDs") from exc
    return list(result.scalars().all())


async def _write(db: AsyncSession, prd: PRD, values: Dict[str, Any]) -> PRD:
    for field, value in values.items():
        setattr(prd, field, value)
    try:
        await db.flush()
        await db.refresh(prd)
    except SQLAlchemyError as exc:
        logger.error("update of PRD id=%s failed: %s", prd.id, exc)
        raise PersistenceError("Failed to update PRD") from exc
    return prd


async def update_prd(
    db: AsyncSession,
    prd: PRD,
    title: Optional[str] = None,
    content: Optional[PRDContent] = None,
) -> PRD:
    """Whole-document overwrite of title and/or content; description is untouched."""
    values: Dict[str, Any] = {}
    if title is not None:
        values["title"] = title.strip() or prd.title
    if content is not None:
        values["json_data"] = content.to_json_dict()
        values["markdown"] = render_markdown(content)

    if not values:
        return prd

    prd = await _write(db, prd, values)
    logger.info("Updated PRD id=%s fields=%s", prd.id, sorted(values))
    return prd


async def save_section(db: AsyncSession, prd: PRD, merged: PRDDocument) -> PRD:
    """
    Persist the result of a section merge.

    Only ``json_data`` and ``markdown`` are written; metadata stays as stored.
    """
    if merged.id != prd.id:
        raise PersistenceError(f"Merged document {merged.id} does not match PRD {prd.id}")

    prd = await _write(db, prd, {"json_data": merged.json_data, "markdown": merged.markdown})
    logger.info("Saved regenerated section for PRD id=%s", prd.id)
    return prd


async def delete_prd(db: AsyncSession, prd: PRD) -> None:
    """Remove *prd* permanently."""
    try:
        await db.delete(prd)
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("delete_prd failed for id=%s: %s", prd.id, exc)
        raise PersistenceError("Failed to delete PRD") from exc
    logger.info("Deleted PRD id=%s", prd.id)
