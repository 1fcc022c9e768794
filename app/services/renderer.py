"""
Deterministic Markdown rendering and file exports for PRD content.

``render_markdown`` is a pure function of the content: the same content always
renders to the same string, byte for byte, which is what the Markdown copy
and download features hand to the user.  Lines that end a paragraph or a
bullet carry two trailing spaces (a Markdown hard break).
"""
from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Union

from app.models.schemas import PRDContent, PRDDocument
from app.services.prd_schema import SectionName

ContentLike = Union[PRDContent, Dict[str, Any]]

_BREAK = "  "
_RULE = "---"
_NOT_SPECIFIED = "Not specified"


def _as_content(content: ContentLike) -> PRDContent:
    if isinstance(content, PRDContent):
        return content
    return PRDContent.model_validate(content)


def _bullets(items: List[str], indent: str = "", bold: bool = False) -> List[str]:
    if bold:
        return [f"{indent}- **{item}**{_BREAK}" for item in items]
    return [f"{indent}- {item}{_BREAK}" for item in items]


# ---------------------------------------------------------------------------
# Per-section Markdown blocks
# ---------------------------------------------------------------------------

def _overview_md(c: PRDContent) -> List[str]:
    o = c.overview
    return [
        f"**Idea Summary:** {o.idea_summary}{_BREAK}",
        "",
        f"**Problem Statement:** {o.problem_statement}{_BREAK}",
        "",
        f"**Solution:** {o.solution}{_BREAK}",
        "",
        f"**Target Audience:**{_BREAK}",
        *_bullets(o.target_audience),
    ]


def _features_md(c: PRDContent) -> List[str]:
    f = c.features
    return [
        "### **Core Features**",
        *_bullets(f.core_features, bold=True),
        "",
        "### **User Roles**",
        f"- **Guest Users**: {f.user_roles.guest}{_BREAK}",
        f"- **Registered Users**: {f.user_roles.registered}{_BREAK}",
        f"- **Premium Users**: {f.user_roles.premium}{_BREAK}",
        "",
        "### **Monetization Model**",
        *_bullets(f.monetization_model, bold=True),
    ]


def _tech_stack_md(c: PRDContent) -> List[str]:
    t = c.tech_stack
    return [
        f"- **Frontend:** {t.frontend}{_BREAK}",
        f"- **Backend:** {t.backend}{_BREAK}",
        f"- **Database:** {t.database}{_BREAK}",
        f"- **Auth:** {t.auth}{_BREAK}",
    ]


def _ai_integration_md(c: PRDContent) -> List[str]:
    ai = c.ai_integration
    if ai is None:
        return [
            f"- **AI Model:** {_NOT_SPECIFIED}{_BREAK}",
            f"- **AI Features:** {_NOT_SPECIFIED}{_BREAK}",
        ]
    return [
        f"- **AI Model:** {ai.model}{_BREAK}",
        f"- **AI Features:**{_BREAK}",
        *_bullets(ai.features, indent="  "),
    ]


def _ui_ux_md(c: PRDContent) -> List[str]:
    u = c.ui_ux_design
    return [
        f"- **Style:** {u.style}{_BREAK}",
        f"- **Key Elements:**{_BREAK}",
        *_bullets(u.key_elements, indent="  "),
    ]


def _deployment_md(c: PRDContent) -> List[str]:
    d = c.deployment
    return [
        f"- **Hosting:** {d.hosting}{_BREAK}",
        f"- **Scalability:**{_BREAK}",
        *_bullets(d.scalability, indent="  "),
    ]


def _roadmap_md(c: PRDContent) -> List[str]:
    r = c.roadmap
    return [
        f"1. **MVP:** {r.mvp}{_BREAK}",
        f"2. **UI/UX:** {r.ui_ux}{_BREAK}",
        f"3. **AI Integration:** {r.ai_integration}{_BREAK}",
        f"4. **Monetization:** {r.monetization}{_BREAK}",
        f"5. **Launch:** {r.launch}{_BREAK}",
    ]


_SECTION_MD: Dict[SectionName, Callable[[PRDContent], List[str]]] = {
    SectionName.OVERVIEW: _overview_md,
    SectionName.FEATURES: _features_md,
    SectionName.TECH_STACK: _tech_stack_md,
    SectionName.AI_INTEGRATION: _ai_integration_md,
    SectionName.UI_UX_DESIGN: _ui_ux_md,
    SectionName.DEPLOYMENT: _deployment_md,
    SectionName.ROADMAP: _roadmap_md,
}


def render_markdown(content: ContentLike) -> str:
    """Render *content* (schema-valid) to the fixed PRD Markdown layout."""
    c = _as_content(content)
    lines: List[str] = [f"# {c.startup_name}"]

    for number, section in enumerate(SectionName, start=1):
        if number > 1:
            lines += ["", _RULE]
        lines += ["", f"## {number}. {section.display_name}"]
        lines += _SECTION_MD[section](c)

    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Plain-text section dump (prompt context for regeneration)
# ---------------------------------------------------------------------------

def render_section_text(content: ContentLike, section: SectionName) -> str:
    """Return a short ``Label: value`` dump of one section's current values."""
    c = _as_content(content)

    if section is SectionName.OVERVIEW:
        o = c.overview
        return (
            f"Summary: {o.idea_summary}\n"
            f"Problem: {o.problem_statement}\n"
            f"Solution: {o.solution}\n"
            f"Target audience: {', '.join(o.target_audience)}"
        )
    if section is SectionName.FEATURES:
        f = c.features
        roles = f.user_roles
        return (
            f"Core features: {', '.join(f.core_features)}\n"
            f"User roles: guest: {roles.guest}; registered: {roles.registered}; "
            f"premium: {roles.premium}\n"
            f"Monetization: {', '.join(f.monetization_model)}"
        )
    if section is SectionName.TECH_STACK:
        t = c.tech_stack
        return (
            f"Frontend: {t.frontend}\n"
            f"Backend: {t.backend}\n"
            f"Database: {t.database}\n"
            f"Auth: {t.auth}"
        )
    if section is SectionName.AI_INTEGRATION:
        ai = c.ai_integration
        if ai is None:
            return f"Model: {_NOT_SPECIFIED}\nFeatures: {_NOT_SPECIFIED}"
        return f"Model: {ai.model}\nFeatures: {', '.join(ai.features)}"
    if section is SectionName.UI_UX_DESIGN:
        u = c.ui_ux_design
        return f"Style: {u.style}\nKey elements: {', '.join(u.key_elements)}"
    if section is SectionName.DEPLOYMENT:
        d = c.deployment
        return f"Hosting: {d.hosting}\nScalability: {', '.join(d.scalability)}"

    r = c.roadmap
    return (
        f"MVP: {r.mvp}\n"
        f"UI/UX: {r.ui_ux}\n"
        f"AI Integration: {r.ai_integration}\n"
        f"Monetization: {r.monetization}\n"
        f"Launch: {r.launch}"
    )


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

def export_markdown(document: PRDDocument) -> str:
    """The stored Markdown, verbatim."""
    return document.markdown


def export_json(document: PRDDocument) -> str:
    """The stored content, pretty-printed with a 2-space indent."""
    return json.dumps(document.json_data, indent=2, ensure_ascii=False)


def export_filename(title: str, extension: str) -> str:
    """``"My Cool App"`` → ``"my-cool-app.md"``."""
    slug = re.sub(r"\s+", "-", title.strip()).lower() or "untitled-prd"
    return f"{slug}.{extension}"
