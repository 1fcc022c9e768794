"""
Error taxonomy for PRD generation, regeneration and persistence.

GenerationError subclasses describe why a call to the generation endpoint
produced nothing usable.  All of them except ConfigurationError are absorbed
by the fallback generator on the full-document path.
"""
from __future__ import annotations


class PRDForgeError(Exception):
    """Base class for all application errors."""


# ---------------------------------------------------------------------------
# Generation path
# ---------------------------------------------------------------------------

class GenerationError(PRDForgeError):
    """The generation endpoint could not produce a usable document."""


class ConfigurationError(GenerationError):
    """No Gemini API key is configured.  Never retried, never absorbed."""


class TransportError(GenerationError):
    """HTTP failure talking to the generation endpoint."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(GenerationError):
    """The endpoint answered but the envelope carried no text payload."""


class ParseError(GenerationError):
    """The reply text contained no JSON object that could be parsed or repaired."""


class ValidationError(GenerationError):
    """The parsed JSON is missing required PRD fields."""


# ---------------------------------------------------------------------------
# Section regeneration / persistence
# ---------------------------------------------------------------------------

class SectionExtractionError(PRDForgeError):
    """A regenerated fragment could not be shaped into the target section."""

    def __init__(self, section: str, message: str) -> None:
        super().__init__(f"{section}: {message}")
        self.section = section


class PersistenceError(PRDForgeError):
    """A store operation failed; nothing was committed."""


class PendingIdeaError(PRDForgeError):
    """A pending-idea token is unknown or has expired."""
