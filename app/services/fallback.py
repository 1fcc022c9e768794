"""
Offline fallback PRD.

Used when the generation endpoint is down, rate-limited or returns nothing
usable.  The output is deterministic for a given idea and always passes
``validate_prd``; quality is traded for availability.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from app.models.schemas import PRDContent
from app.services.renderer import render_markdown

logger = logging.getLogger(__name__)

NAME_MAX_CHARS = 30


def fallback_startup_name(idea: str) -> str:
    """
    The idea itself when short; otherwise its first 30 characters with the
    last (possibly cut) word dropped and an ellipsis appended.
    """
    idea = idea.strip()
    if len(idea) <= NAME_MAX_CHARS:
        return idea or "Untitled Startup"
    words = idea[:NAME_MAX_CHARS].split(" ")
    head = " ".join(words[:-1]) if len(words) > 1 else words[0]
    return head.rstrip() + "..."


def fallback_content(idea: str) -> Dict[str, Any]:
    """Schema-complete content built from boilerplate plus the literal idea."""
    return {
        "startup_name": fallback_startup_name(idea),
        "overview": {
            "idea_summary": f"A SaaS platform that {idea.strip().lower()}",
            "problem_statement": "Many users struggle with this problem and need an efficient solution.",
            "solution": "Our platform provides an intuitive and powerful solution to address this need.",
            "target_audience": [
                "Small to medium businesses",
                "Individual professionals",
                "Enterprise customers",
            ],
        },
        "features": {
            "core_features": [
                "User-friendly dashboard",
                "Data analytics and reporting",
                "Integration with existing tools",
                "Mobile application",
            ],
            "user_roles": {
                "guest": "Limited access to basic features",
                "registered": "Full access to standard features",
                "premium": "Access to advanced features and priority support",
            },
            "monetization_model": ["Freemium", "Subscription-based", "Enterprise pricing"],
        },
        "tech_stack": {
            "frontend": "Next.js, React, Tailwind CSS",
            "backend": "Node.js, Express",
            "database": "PostgreSQL, Redis",
            "auth": "OAuth 2.0, JWT",
        },
        "ai_integration": {
            "model": "Custom ML models",
            "features": [
                "Predictive analytics",
                "Natural language processing",
                "Recommendation engine",
            ],
        },
        "ui_ux_design": {
            "style": "Modern, minimalist design with intuitive navigation",
            "key_elements": [
                "Responsive layout",
                "Dark/light mode",
                "Customizable dashboard",
                "Accessible design",
            ],
        },
        "deployment": {
            "hosting": "AWS, Vercel",
            "scalability": [
                "Containerization with Docker",
                "Kubernetes orchestration",
                "CDN for static assets",
            ],
        },
        "roadmap": {
            "mvp": "Launch core features with basic functionality",
            "ui_ux": "Refine user experience based on initial feedback",
            "ai_integration": "Implement AI features for enhanced functionality",
            "monetization": "Introduce premium tiers and payment processing",
            "launch": "Full market launch with marketing campaign",
        },
    }


def fallback_prd(idea: str) -> Tuple[str, Dict[str, Any]]:
    """Return ``(markdown, content)`` for *idea* without any network call."""
    content = PRDContent.model_validate(fallback_content(idea)).to_json_dict()
    logger.info("fallback_prd: built fallback document %r", content["startup_name"])
    return render_markdown(content), content
