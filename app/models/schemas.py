"""
Pydantic schemas for the PRD content records and request/response validation.

The section records are the typed form of the JSON the generation endpoint
returns.  They are lenient on input (lists are joined into text fields, bare
strings are wrapped into list fields, unknown keys are dropped) so that a
near-miss reply still produces a complete record.
"""
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from typing import Annotated, Any, Dict, List, Optional
from datetime import datetime


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _coerce_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, (int, float, bool)):
        return str(value)
    return value


def _coerce_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) if not isinstance(v, str) else v for v in value]
    return value


Text = Annotated[str, BeforeValidator(_coerce_text)]
TextList = Annotated[List[str], BeforeValidator(_coerce_list)]


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# PRD content records
# ---------------------------------------------------------------------------

class Overview(_Section):
    idea_summary: Text
    problem_statement: Text
    solution: Text
    target_audience: TextList


class UserRoles(_Section):
    guest: Text
    registered: Text
    premium: Text


class Features(_Section):
    core_features: TextList
    user_roles: UserRoles
    monetization_model: TextList


class TechStack(_Section):
    frontend: Text
    backend: Text
    database: Text
    auth: Text


class AIIntegration(_Section):
    model: Text
    features: TextList


class UIUXDesign(_Section):
    style: Text
    key_elements: TextList


class Deployment(_Section):
    hosting: Text
    scalability: TextList


class Roadmap(_Section):
    mvp: Text
    ui_ux: Text
    ai_integration: Text
    monetization: Text
    launch: Text


class PRDContent(_Section):
    """The structured document: startup name plus the seven sections."""

    startup_name: Text
    overview: Overview
    features: Features
    tech_stack: TechStack
    ai_integration: Optional[AIIntegration] = None
    ui_ux_design: UIUXDesign
    deployment: Deployment
    roadmap: Roadmap

    def to_json_dict(self) -> Dict[str, Any]:
        """Plain dict in section-table order; ai_integration omitted when absent."""
        return self.model_dump(mode="json", exclude_none=True)


class PRDDocument(BaseModel):
    """A persisted PRD as the pipeline sees it (detached from the ORM)."""

    id: Optional[str] = None
    user_id: str
    title: str
    description: str = ""
    markdown: str
    json_data: Dict[str, Any]
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Generation endpoint
# ---------------------------------------------------------------------------

class GeneratePRDResponse(BaseModel):
    """Successful /api/generate-prd payload."""

    markdown: str
    json_data: Dict[str, Any] = Field(..., serialization_alias="json")
    source: str = "gemini"
    fallbackReason: Optional[str] = None  # error class name when source is "fallback"
    requestSucceeded: bool = True


class GenerationErrorResponse(BaseModel):
    error: str
    requestSucceeded: bool = False


class RandomIdeaResponse(BaseModel):
    idea: str


# ---------------------------------------------------------------------------
# Pending ideas
# ---------------------------------------------------------------------------

class PendingIdeaCreateRequest(BaseModel):
    idea: str = Field(..., min_length=1)

    @field_validator("idea")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("idea must not be blank")
        return v


class PendingIdeaResponse(BaseModel):
    token: str
    expires_at: datetime


class PendingIdeaClaimResponse(BaseModel):
    idea: str


# ---------------------------------------------------------------------------
# PRD CRUD
# ---------------------------------------------------------------------------

class PRDCreateRequest(BaseModel):
    """Save a generated PRD.  Markdown is rendered server-side from ``content``."""

    content: PRDContent
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class PRDUpdateRequest(BaseModel):
    """Whole-document overwrite.  ``description`` is not accepted."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[PRDContent] = None


class RegenerateSectionRequest(BaseModel):
    feedback: str = Field(..., min_length=1)

    @field_validator("feedback")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("feedback must not be blank")
        return v


class PRDResponse(BaseModel):
    """Schema for PRD responses."""

    id: str
    user_id: str
    title: str
    description: str
    markdown: str
    json_data: Dict[str, Any]
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PRDSummaryResponse(BaseModel):
    """Dashboard listing entry."""

    id: str
    title: str
    description: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    database: str
    gemini: str
    timestamp: datetime
