"""
Section-scoped merge of a regenerated fragment into an existing PRD.

Exactly one section of ``json_data`` is replaced; the other six are carried
over unchanged and the Markdown is re-rendered.  The document metadata
(``id``, ``user_id``, ``title``, ``description``, ``created_at``) is always
copied from the existing document, whatever the fragment contains.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import SectionExtractionError
from app.models.schemas import PRDContent, PRDDocument
from app.services.prd_schema import SectionName
from app.services.renderer import render_markdown

logger = logging.getLogger(__name__)


def normalize_fragment(section: SectionName, fragment: Any) -> Dict[str, Any]:
    """
    Return the flat field mapping for *section* from *fragment*.

    Accepts both ``{"tech_stack": {...}}`` and the flat ``{...}`` the endpoint
    often returns instead.  Only the section's own field names are kept.
    Raises SectionExtractionError when no field of the section is present.
    """
    if not isinstance(fragment, Mapping):
        raise SectionExtractionError(section.value, "fragment is not a JSON object")

    body: Any = fragment
    nested = fragment.get(section.value)
    if isinstance(nested, Mapping) and any(name in nested for name in section.fields):
        body = nested

    recognized = {name: body[name] for name in section.fields if name in body}
    if not recognized:
        raise SectionExtractionError(
            section.value,
            f"no recognizable fields (expected any of {', '.join(section.fields)})",
        )
    return recognized


def merge_section(
    existing: PRDDocument,
    section: SectionName,
    fragment: Any,
) -> PRDDocument:
    """
    Return a new PRDDocument with *section* replaced by *fragment*.

    Fields the fragment omits keep their existing values so the section stays
    complete.  *existing* is never mutated; on SectionExtractionError nothing
    has changed.
    """
    recognized = normalize_fragment(section, fragment)

    content: Dict[str, Any] = copy.deepcopy(existing.json_data)
    current = content.get(section.value)
    merged_section: Dict[str, Any] = dict(current) if isinstance(current, dict) else {}
    for name, value in copy.deepcopy(recognized).items():
        # Nested records (user_roles) merge key by key
        previous = merged_section.get(name)
        if isinstance(previous, dict) and isinstance(value, Mapping):
            merged_section[name] = {**previous, **value}
        else:
            merged_section[name] = value

    try:
        typed_section = section.model.model_validate(merged_section)
    except PydanticValidationError as exc:
        raise SectionExtractionError(
            section.value, f"fragment does not fit the section shape: {exc.error_count()} error(s)"
        ) from exc

    content[section.value] = typed_section.model_dump(mode="json")

    try:
        typed_content = PRDContent.model_validate(content)
    except PydanticValidationError as exc:
        # Only reachable if the stored document was already malformed.
        raise SectionExtractionError(
            section.value, "existing document does not match the PRD schema"
        ) from exc

    logger.info(
        "merge_section: replaced %s on PRD %s (%d field(s) from fragment)",
        section.value,
        existing.id,
        len(recognized),
    )

    return PRDDocument(
        id=existing.id,
        user_id=existing.user_id,
        title=existing.title,
        description=existing.description,
        created_at=existing.created_at,
        json_data=content,
        markdown=render_markdown(typed_content),
    )
