"""
Saved PRD endpoints.

Route summary
-------------
POST   /api/prds                                       — save a generated PRD
GET    /api/prds                                       — list user's PRDs
GET    /api/prds/{prd_id}                              — PRD detail
PUT    /api/prds/{prd_id}                              — overwrite title / content
DELETE /api/prds/{prd_id}                              — delete PRD

POST   /api/prds/{prd_id}/sections/{section}/regenerate — rewrite one section
GET    /api/prds/{prd_id}/export.md                    — markdown download
GET    /api/prds/{prd_id}/export.json                  — JSON download
"""
import logging
from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies.auth import get_current_user_id, get_or_create_user, get_owned_prd
from app.dependencies.generator import get_prd_generator
from app.exceptions import (
    ConfigurationError,
    EmptyResponseError,
    SectionExtractionError,
    TransportError,
)
from app.models.database_models import PRD, User
from app.models.schemas import (
    PRDCreateRequest,
    PRDResponse,
    PRDSummaryResponse,
    PRDUpdateRequest,
    RegenerateSectionRequest,
)
from app.services import prd_store
from app.services.prd_generator import PRDGenerator
from app.services.prd_schema import SectionName
from app.services.renderer import export_filename, export_json, export_markdown

logger = logging.getLogger(__name__)

router = APIRouter()


def _attachment(body: str, media_type: str, filename: str) -> Response:
    ascii_name = filename.encode("ascii", "ignore").decode().replace('"', "") or "prd"
    disposition = f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": disposition},
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PRD CRUD
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("", response_model=PRDResponse, status_code=status.HTTP_201_CREATED)
async def create_prd(
    body: PRDCreateRequest,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> PRDResponse:
    """Save a generated PRD for the authenticated user."""
    prd = await prd_store.create_prd(
        db,
        user.id,
        body.content,
        title=body.title,
        description=body.description,
    )
    return PRDResponse.model_validate(prd)


@router.get("", response_model=List[PRDSummaryResponse])
async def list_prds(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[PRDSummaryResponse]:
    """List all PRDs belonging to the authenticated user, newest first."""
    prds = await prd_store.list_user_prds(db, user_id)
    return [PRDSummaryResponse.model_validate(p) for p in prds]


@router.get("/{prd_id}", response_model=PRDResponse)
async def get_prd(prd: PRD = Depends(get_owned_prd)) -> PRDResponse:
    return PRDResponse.model_validate(prd)


@router.put("/{prd_id}", response_model=PRDResponse)
async def update_prd(
    body: PRDUpdateRequest,
    prd: PRD = Depends(get_owned_prd),
    db: AsyncSession = Depends(get_db),
) -> PRDResponse:
    """Overwrite title and/or content.  The stored description never changes."""
    prd = await prd_store.update_prd(db, prd, title=body.title, content=body.content)
    return PRDResponse.model_validate(prd)


@router.delete(
    "/{prd_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_prd(
    prd: PRD = Depends(get_owned_prd),
    db: AsyncSession = Depends(get_db),
) -> None:
    await prd_store.delete_prd(db, prd)


# ═══════════════════════════════════════════════════════════════════════════════
# SECTION REGENERATION
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/{prd_id}/sections/{section}/regenerate", response_model=PRDResponse)
async def regenerate_section(
    section: SectionName,
    body: RegenerateSectionRequest,
    prd: PRD = Depends(get_owned_prd),
    db: AsyncSession = Depends(get_db),
    generator: PRDGenerator = Depends(get_prd_generator),
) -> PRDResponse:
    """
    Rewrite one section of a saved PRD according to free-text feedback.

    Only the target section changes; title, description and creation time
    are kept from the stored row.  Failures leave the stored PRD untouched.
    """
    if len(body.feedback) > settings.MAX_FEEDBACK_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Feedback is too long (max {settings.MAX_FEEDBACK_LENGTH} characters).",
        )

    document = prd_store.to_document(prd)
    logger.info("Regenerating section %s of PRD id=%s", section.value, prd.id)

    try:
        merged = await generator.regenerate_section(document, section, body.feedback)
    except ConfigurationError as exc:
        logger.error("regenerate_section: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service is not properly configured.",
        )
    except (TransportError, EmptyResponseError) as exc:
        logger.warning("regenerate_section failed for PRD id=%s: %s", prd.id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"AI service request failed: {exc}",
        )
    except SectionExtractionError as exc:
        logger.warning("regenerate_section produced no usable %s: %s", exc.section, exc)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Could not extract section '{exc.section}' from the AI response.",
        )

    prd = await prd_store.save_section(db, prd, merged)
    return PRDResponse.model_validate(prd)


# ═══════════════════════════════════════════════════════════════════════════════
# EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/{prd_id}/export.md")
async def export_prd_markdown(prd: PRD = Depends(get_owned_prd)) -> Response:
    document = prd_store.to_document(prd)
    return _attachment(
        export_markdown(document),
        "text/markdown; charset=utf-8",
        export_filename(document.title, "md"),
    )


@router.get("/{prd_id}/export.json")
async def export_prd_json(prd: PRD = Depends(get_owned_prd)) -> Response:
    document = prd_store.to_document(prd)
    return _attachment(
        export_json(document),
        "application/json",
        export_filename(document.title, "json"),
    )
