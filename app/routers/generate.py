"""
PRD generation endpoint.

Route
-----
POST /api/generate-prd   {idea} → {markdown, json, source, requestSucceeded}

Errors keep the ``{error, requestSucceeded: false}`` body the frontend reads:
400 bad input, 503 Gemini not configured, 500 anything unexpected.  Gemini
outages and unusable replies are NOT errors: the fallback document is
returned with ``source = "fallback"``.
"""
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies.generator import get_prd_generator
from app.exceptions import ConfigurationError
from app.models.schemas import GeneratePRDResponse, GenerationErrorResponse
from app.services.prd_generator import PRDGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=GenerationErrorResponse(error=message).model_dump(),
    )


@router.post(
    "",
    response_model=GeneratePRDResponse,
    responses={
        400: {"model": GenerationErrorResponse},
        503: {"model": GenerationErrorResponse},
        500: {"model": GenerationErrorResponse},
    },
)
async def generate_prd(
    request: Request,
    generator: PRDGenerator = Depends(get_prd_generator),
):
    """Generate a PRD from a one-paragraph startup idea."""
    try:
        body = await request.json()
    except ValueError:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request format. Please provide a valid JSON body.",
        )

    idea = body.get("idea") if isinstance(body, dict) else None
    if not isinstance(idea, str) or not idea.strip():
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request. Please provide a valid idea.",
        )
    idea = idea.strip()
    if len(idea) > settings.MAX_IDEA_LENGTH:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            f"Idea is too long (max {settings.MAX_IDEA_LENGTH} characters).",
        )

    try:
        logger.info("Generating PRD for idea: %s...", idea[:50])
        result = await generator.generate_prd(idea)
    except ConfigurationError as exc:
        logger.error("generate_prd: %s", exc)
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "AI service is not properly configured. Please try again later.",
        )
    except Exception as exc:
        logger.error("Unexpected error generating PRD: %s", exc, exc_info=True)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        )

    payload = GeneratePRDResponse(
        markdown=result.markdown,
        json_data=result.content,
        source=result.source,
        fallbackReason=result.error,
    )
    return JSONResponse(content=payload.model_dump(by_alias=True))
