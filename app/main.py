"""
Main FastAPI application for the PRD Forge backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import AsyncSessionLocal, close_db, init_db
from app.exceptions import PersistenceError
from app.routers import generate, health, ideas, prds
from app.services import pending_ideas

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _prepare_database() -> None:
    """Create tables, then drop pending ideas that expired while we were down."""
    await init_db()
    async with AsyncSessionLocal() as session:
        removed = await pending_ideas.purge_expired(session)
        await session.commit()
    if removed:
        logger.info("Purged %d expired pending idea(s)", removed)


def _check_gemini() -> bool:
    """Report whether a Gemini API key is configured.  Never raises."""
    if settings.gemini_configured():
        logger.info("✓ Gemini configured (model: %s)", settings.GEMINI_MODEL)
        return True
    logger.warning(
        "⚠ GEMINI_API_KEY is not set; /api/generate-prd will answer 503 "
        "and section regeneration is unavailable."
    )
    return False


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("Starting PRD Forge backend …")
    await _prepare_database()
    _check_gemini()
    logger.info(
        "PRD Forge ready on http://%s:%d (docs at /docs, CORS: %s)",
        settings.HOST,
        settings.PORT,
        ", ".join(settings.get_allowed_origins()),
    )

    yield

    logger.info("Shutting down PRD Forge backend …")
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PRD Forge API",
    description=(
        "**PRD Forge**: turn a one-paragraph startup idea into a structured "
        "Product Requirements Document.\n\n"
        "Key endpoints:\n"
        "- `POST /api/generate-prd`: generate a PRD from an idea\n"
        "- `POST /api/prds`: save a generated PRD\n"
        "- `GET  /api/prds`: list saved PRDs\n"
        "- `POST /api/prds/{id}/sections/{section}/regenerate`: rewrite one section\n"
        "- `GET  /api/prds/{id}/export.md`: download as Markdown\n"
        "- `GET  /api/ideas/random`: sample startup idea\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------

_QUIET_PATHS = frozenset({"/", "/api/health", "/api/health/"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, caller and status; stamp ``X-Process-Time`` in ms."""
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    if request.url.path not in _QUIET_PATHS:
        logger.info(
            "%s %s user=%s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            request.headers.get("X-User-Id", "-"),
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

def _error_body(request: Request, detail: str, exc: Exception) -> dict:
    return {
        "detail": detail,
        "error": str(exc),
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    """Store failures raised out of a route, after ``get_db`` rolled back."""
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, "A database operation failed. Please try again.", exc),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, "Internal server error", exc),
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,    prefix="/api/health",       tags=["Health"])
app.include_router(generate.router,  prefix="/api/generate-prd", tags=["Generation"])
app.include_router(ideas.router,     prefix="/api",              tags=["Ideas"])
app.include_router(prds.router,      prefix="/api/prds",         tags=["PRDs"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root: returns basic service info."""
    return {
        "name": "PRD Forge API",
        "version": "0.1.0",
        "description": "Startup idea to Product Requirements Document",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "generate": "/api/generate-prd",
            "prds": "/api/prds",
            "random_idea": "/api/ideas/random",
            "pending_ideas": "/api/pending-ideas",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
