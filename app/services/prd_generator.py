"""
PRD generation and section regeneration pipelines.

Full generation:
    idea → generation prompt → Gemini → extract_json → validate_prd
         → PRDContent → render_markdown
    Any GenerationError except ConfigurationError falls back to
    ``fallback_prd`` so the caller always gets a complete document.

Section regeneration:
    document + section + feedback → section prompt → Gemini
         → parse_json_object → merge_section
    No fallback: transport/empty errors and SectionExtractionError reach the
    caller, and the stored document is left as it was.

Public API
----------
PRDGenerator.generate_prd(idea)                              -> GenerationResult
PRDGenerator.regenerate_section(document, section, feedback) -> PRDDocument
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import (
    ConfigurationError,
    GenerationError,
    ParseError,
    SectionExtractionError,
    ValidationError,
)
from app.models.schemas import PRDContent, PRDDocument
from app.services.fallback import fallback_prd
from app.services.gemini_client import GeminiClient
from app.services.json_repair import extract_json, is_skeleton, parse_json_object
from app.services.prd_schema import SectionName, validate_prd
from app.services.prompts import build_generation_prompt, build_section_prompt
from app.services.renderer import render_markdown, render_section_text
from app.services.section_merge import merge_section

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class GenerationResult:
    """Markdown + structured content, and where they came from."""

    markdown: str
    content: Dict[str, Any]
    source: str  # "gemini" or "fallback"
    error: Optional[str] = None  # why the fallback was used


class PRDGenerator:
    """Drives the generation client through parsing, validation and rendering."""

    SOURCE_GEMINI = "gemini"
    SOURCE_FALLBACK = "fallback"

    def __init__(self, client: Optional[GeminiClient] = None) -> None:
        self.client = client or GeminiClient()

    # ------------------------------------------------------------------
    # Full document
    # ------------------------------------------------------------------

    async def generate_prd(self, idea: str) -> GenerationResult:
        """
        Generate a PRD for *idea*.

        Raises ConfigurationError if no API key is set; every other failure
        yields the fallback document with ``source="fallback"``.
        """
        try:
            markdown, content = await self._generate_with_model(idea)
            logger.info("generate_prd: generated %r with Gemini", content.get("startup_name"))
            return GenerationResult(markdown=markdown, content=content, source=self.SOURCE_GEMINI)
        except ConfigurationError:
            raise
        except GenerationError as exc:
            logger.warning(
                "generate_prd: %s (%s); using fallback generator",
                type(exc).__name__,
                exc,
            )
            markdown, content = fallback_prd(idea)
            return GenerationResult(
                markdown=markdown,
                content=content,
                source=self.SOURCE_FALLBACK,
                error=type(exc).__name__,
            )

    async def _generate_with_model(self, idea: str) -> Tuple[str, Dict[str, Any]]:
        raw = await self.client.generate(build_generation_prompt(idea))

        parsed = extract_json(raw)
        if is_skeleton(parsed):
            raise ParseError("reply contained no parsable JSON object")
        if not validate_prd(parsed):
            raise ValidationError("parsed JSON is missing required PRD fields")

        try:
            content = PRDContent.model_validate(parsed)
        except PydanticValidationError as exc:
            raise ValidationError(f"PRD fields have unusable values: {exc.error_count()} error(s)") from exc

        return render_markdown(content), content.to_json_dict()

    # ------------------------------------------------------------------
    # One section
    # ------------------------------------------------------------------

    async def regenerate_section(
        self,
        document: PRDDocument,
        section: SectionName,
        feedback: str,
    ) -> PRDDocument:
        """
        Regenerate *section* of *document* according to *feedback*.

        Returns a new PRDDocument; *document* is not modified.
        """
        startup_name = str(document.json_data.get("startup_name") or document.title)
        prompt = build_section_prompt(
            section,
            startup_name=startup_name,
            feedback=feedback,
            current_section_text=render_section_text(document.json_data, section),
        )

        raw = await self.client.generate(prompt)

        fragment = parse_json_object(raw)
        if fragment is None:
            logger.warning(
                "regenerate_section: no JSON object in reply for %s. Preview: %s",
                section.value,
                raw[:300],
            )
            raise SectionExtractionError(section.value, "reply contained no JSON object")

        return merge_section(document, section, fragment)

