"""
The fixed PRD section table and the presence validator.

Every PRD has a ``startup_name`` and seven sections in this order:
overview, features, tech_stack, ai_integration, ui_ux_design, deployment,
roadmap.  ``validate_prd`` is the gate between a parsed generation reply and
the renderer; it only checks key presence and the three list-valued fields,
deeper shaping is left to the pydantic records in app.models.schemas.
"""
from __future__ import annotations

import enum
from typing import Any, Dict, Tuple, Type

from pydantic import BaseModel

from app.models.schemas import (
    AIIntegration,
    Deployment,
    Features,
    Overview,
    Roadmap,
    TechStack,
    UIUXDesign,
)


class SectionName(str, enum.Enum):
    """The seven PRD sections, in document order."""

    OVERVIEW = "overview"
    FEATURES = "features"
    TECH_STACK = "tech_stack"
    AI_INTEGRATION = "ai_integration"
    UI_UX_DESIGN = "ui_ux_design"
    DEPLOYMENT = "deployment"
    ROADMAP = "roadmap"

    @property
    def display_name(self) -> str:
        return SECTION_TITLES[self]

    @property
    def fields(self) -> Tuple[str, ...]:
        return SECTION_FIELDS[self]

    @property
    def model(self) -> Type[BaseModel]:
        return SECTION_MODELS[self]


SECTION_FIELDS: Dict[SectionName, Tuple[str, ...]] = {
    SectionName.OVERVIEW: ("idea_summary", "problem_statement", "solution", "target_audience"),
    SectionName.FEATURES: ("core_features", "user_roles", "monetization_model"),
    SectionName.TECH_STACK: ("frontend", "backend", "database", "auth"),
    SectionName.AI_INTEGRATION: ("model", "features"),
    SectionName.UI_UX_DESIGN: ("style", "key_elements"),
    SectionName.DEPLOYMENT: ("hosting", "scalability"),
    SectionName.ROADMAP: ("mvp", "ui_ux", "ai_integration", "monetization", "launch"),
}

SECTION_TITLES: Dict[SectionName, str] = {
    SectionName.OVERVIEW: "Overview",
    SectionName.FEATURES: "Features & Functionality",
    SectionName.TECH_STACK: "Technology Stack",
    SectionName.AI_INTEGRATION: "AI Integration",
    SectionName.UI_UX_DESIGN: "UI/UX Design",
    SectionName.DEPLOYMENT: "Deployment",
    SectionName.ROADMAP: "Roadmap",
}

SECTION_MODELS: Dict[SectionName, Type[BaseModel]] = {
    SectionName.OVERVIEW: Overview,
    SectionName.FEATURES: Features,
    SectionName.TECH_STACK: TechStack,
    SectionName.AI_INTEGRATION: AIIntegration,
    SectionName.UI_UX_DESIGN: UIUXDesign,
    SectionName.DEPLOYMENT: Deployment,
    SectionName.ROADMAP: Roadmap,
}

USER_ROLE_FIELDS: Tuple[str, ...] = ("guest", "registered", "premium")

# ai_integration may be missing from a reply.
REQUIRED_SECTIONS: Tuple[SectionName, ...] = tuple(
    s for s in SectionName if s is not SectionName.AI_INTEGRATION
)

LIST_FIELDS: Tuple[Tuple[SectionName, str], ...] = (
    (SectionName.OVERVIEW, "target_audience"),
    (SectionName.FEATURES, "core_features"),
    (SectionName.FEATURES, "monetization_model"),
)


def validate_prd(obj: Any) -> bool:
    """
    Return True if *obj* has every key the renderer needs.

    Checks: ``startup_name``; every required section present as a dict;
    every overview and features sub-key; the three list fields are lists;
    ``ai_integration`` is a dict when present.  Never raises.
    """
    if not isinstance(obj, dict):
        return False
    if "startup_name" not in obj:
        return False

    for section in REQUIRED_SECTIONS:
        if not isinstance(obj.get(section.value), dict):
            return False

    ai = obj.get(SectionName.AI_INTEGRATION.value)
    if ai is not None and not isinstance(ai, dict):
        return False

    for section in (SectionName.OVERVIEW, SectionName.FEATURES):
        body = obj[section.value]
        if any(name not in body for name in section.fields):
            return False

    for section, name in LIST_FIELDS:
        if not isinstance(obj[section.value].get(name), list):
            return False

    return True
