"""
Prompt templates for the Gemini generation endpoint.

Both templates are module-level constants so they can be tuned without
touching logic code.  The builders are pure string functions; rejecting an
empty idea or feedback is the caller's job.
"""
from __future__ import annotations

import json
from typing import Any, Dict

from app.services.prd_schema import SECTION_FIELDS, SectionName, USER_ROLE_FIELDS


# ---------------------------------------------------------------------------
# Schema skeleton (field names only) embedded in the prompts
# ---------------------------------------------------------------------------

_FIELD_HINTS: Dict[str, Any] = {
    "target_audience": ["Audience 1", "Audience 2"],
    "core_features": ["Feature 1", "Feature 2"],
    "monetization_model": ["Model 1", "Model 2"],
    "features": ["AI feature 1", "AI feature 2"],
    "key_elements": ["Element 1", "Element 2"],
    "scalability": ["Scalability approach 1", "Scalability approach 2"],
}


def _section_shape(section: SectionName) -> Dict[str, Any]:
    shape: Dict[str, Any] = {}
    for name in section.fields:
        if name == "user_roles":
            shape[name] = {role: f"What a {role} user can do" for role in USER_ROLE_FIELDS}
        else:
            shape[name] = _FIELD_HINTS.get(name, "...")
    return shape


def prd_json_shape() -> Dict[str, Any]:
    """The full PRD JSON shape with placeholder values, in section order."""
    shape: Dict[str, Any] = {"startup_name": "Name of the startup"}
    for section in SECTION_FIELDS:
        shape[section.value] = _section_shape(section)
    return shape


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_GENERATION_PROMPT = """\
You are a senior product manager writing a Product Requirements Document (PRD).

Write a comprehensive PRD for the following startup idea:

"{idea}"

The PRD must cover these sections:
1. Overview (idea summary, problem statement, solution, target audience)
2. Features & Functionality (core features, user roles, monetization model)
3. Technology Stack (frontend, backend, database, auth)
4. AI Integration (model and AI features, if applicable)
5. UI/UX Design (style, key elements)
6. Deployment (hosting, scalability)
7. Roadmap (mvp, ui/ux, ai integration, monetization, launch)

Return ONE JSON object with exactly this structure:
{shape}

Respond ONLY with valid JSON. No explanation, no markdown, no code fences.\
"""

_SECTION_PROMPT = """\
You are a senior product manager improving one section of a Product \
Requirements Document.

Startup: "{startup_name}"
Section: "{section_title}"

Feedback from the author:
"{feedback}"

Current content of this section:
---
{current_text}
---

Rewrite the "{section_title}" section so that it addresses the feedback.
Keep the same fields; improve their content.

Return ONE JSON object containing ONLY this section's fields, not nested \
under the section name, with exactly this structure:
{shape}

Respond ONLY with valid JSON. No explanation, no markdown, no code fences.\
"""


def build_generation_prompt(idea: str) -> str:
    """Prompt asking for a whole PRD as one JSON object."""
    return _GENERATION_PROMPT.format(
        idea=idea,
        shape=json.dumps(prd_json_shape(), indent=2),
    )


def build_section_prompt(
    section: SectionName,
    startup_name: str,
    feedback: str,
    current_section_text: str,
) -> str:
    """Prompt asking for the flat field set of *section* only."""
    return _SECTION_PROMPT.format(
        startup_name=startup_name,
        section_title=section.display_name,
        feedback=feedback,
        current_text=current_section_text,
        shape=json.dumps(_section_shape(section), indent=2),
    )
