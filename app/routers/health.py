"""
GET /api/health/ : database round-trip plus Gemini key presence.

The frontend polls this, so it never calls Gemini.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
import logging

from app.config import settings
from app.database import get_db, ping
from app.models.schemas import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """``healthy`` only when the database answers and a key is configured."""
    db_status = "ok"
    try:
        await ping(db)
    except Exception as exc:
        logger.error("health_check: database ping failed: %s", exc)
        db_status = "error"

    gemini_status = "ok" if settings.gemini_configured() else "not_configured"

    overall_status = "healthy" if db_status == "ok" and gemini_status == "ok" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        gemini=gemini_status,
        timestamp=datetime.now(timezone.utc),
    )
