"""Database and schema models for PRD Forge."""
from app.models.database_models import (
    User,
    PRD,
    PendingIdea,
)
from app.models.schemas import (
    PRDContent,
    PRDDocument,
    PRDCreateRequest,
    PRDUpdateRequest,
    PRDResponse,
    RegenerateSectionRequest,
    GeneratePRDResponse,
    HealthCheckResponse,
)

__all__ = [
    # Database models
    "User",
    "PRD",
    "PendingIdea",
    # Pydantic schemas
    "PRDContent",
    "PRDDocument",
    "PRDCreateRequest",
    "PRDUpdateRequest",
    "PRDResponse",
    "RegenerateSectionRequest",
    "GeneratePRDResponse",
    "HealthCheckResponse",
]
