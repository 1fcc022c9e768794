"""
Tolerant JSON extraction for generation-endpoint replies.

The endpoint is not grammar-constrained, so a reply is often near-miss JSON:
wrapped in a ```json fence, surrounded by prose, with trailing commas,
missing separators or bare keys.  Strategies, each tried only if the
previous one did not yield a JSON object:

1. Locate candidate spans: a ```json fenced block first, then the first
   balanced ``{…}`` span, then the greedy first-``{``-to-last-``}`` span.
2. Parse each candidate directly.
3. Repair each candidate and parse again.  Repairs run outside string
   literals only: trailing commas, missing commas between adjacent values,
   bare identifier keys, Python literals, ``//`` comments.  A truncated
   object is closed as a last resort.
4. ``extract_json`` only: build a minimal skeleton, recovering
   ``startup_name`` / ``idea_summary`` from the raw text by pattern search.

Public API
----------
locate_json_candidates(text)  -> List[str]
locate_json_object(text)      -> Optional[str]
repair_json(text)             -> str
parse_json_object(text)       -> Optional[dict]   (steps 1-3, never raises)
extract_json(text)            -> dict             (steps 1-4, never raises)
is_skeleton(obj)              -> bool
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

SKELETON_STARTUP_NAME = "Generated PRD"
SKELETON_IDEA_SUMMARY = "Generated from provided idea"

_FENCE_RE = re.compile(r"```json[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_STRING_RE = re.compile(r'"(?:\\.|[^"\\])*"', re.DOTALL)

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_MISSING_COMMA_RE = re.compile(r"([}\]])(\s*)(?=[{\[])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_COMMENT_RE = re.compile(r"//[^\n]*")

_STARTUP_NAME_RE = re.compile(r'"startup_name"\s*:\s*"([^"]+)"')
_IDEA_SUMMARY_RE = re.compile(r'"idea_summary"\s*:\s*"([^"]+)"')


# ---------------------------------------------------------------------------
# Step 1: locate
# ---------------------------------------------------------------------------

def _balanced_span(text: str, open_b: str = "{", close_b: str = "}") -> str:
    """
    First complete balanced open_b … close_b structure in *text*, string-aware.
    Returns empty string if none closes.
    """
    start = text.find(open_b)
    if start == -1:
        return ""

    depth = 0
    in_string = False
    escape_next = False

    for i, ch in enumerate(text[start:], start=start):
        if escape_next:
            escape_next = False
            continue
        if ch == "\\" and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == open_b:
            depth += 1
        elif ch == close_b:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return ""


def _greedy_span(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return ""
    return text[start : end + 1]


def locate_json_candidates(text: str) -> List[str]:
    """Candidate JSON object spans in priority order, de-duplicated."""
    candidates: List[str] = []

    fence = _FENCE_RE.search(text)
    if fence:
        inner = fence.group(1).strip()
        candidates.append(_balanced_span(inner) or inner)

    candidates.append(_balanced_span(text))
    candidates.append(_greedy_span(text))

    # Unclosed object (truncated reply): everything from the first brace.
    brace = text.find("{")
    if brace != -1:
        candidates.append(text[brace:].strip())

    seen = set()
    unique: List[str] = []
    for c in candidates:
        if c and c not in seen:
            seen.add(c)
            unique.append(c)
    return unique


def locate_json_object(text: Optional[str]) -> Optional[str]:
    """Best single candidate span, or None when *text* has no ``{``."""
    if not text:
        return None
    candidates = locate_json_candidates(text)
    return candidates[0] if candidates else None


# ---------------------------------------------------------------------------
# Step 3: repair
# ---------------------------------------------------------------------------

def _split_strings(text: str) -> List[Tuple[bool, str]]:
    """Split *text* into ``(is_string_literal, chunk)`` pieces."""
    pieces: List[Tuple[bool, str]] = []
    pos = 0
    for m in _STRING_RE.finditer(text):
        if m.start() > pos:
            pieces.append((False, text[pos : m.start()]))
        pieces.append((True, m.group(0)))
        pos = m.end()
    if pos < len(text):
        pieces.append((False, text[pos:]))
    return pieces


def _outside_strings(pieces: List[Tuple[bool, str]], fn: Callable[[str], str]) -> List[Tuple[bool, str]]:
    return [(is_str, chunk if is_str else fn(chunk)) for is_str, chunk in pieces]


def _insert_missing_commas(pieces: List[Tuple[bool, str]]) -> List[Tuple[bool, str]]:
    """
    ``} {`` / ``] [`` inside a structural chunk, plus ``}`` / ``]`` / a string
    followed by a string across chunk boundaries (``}\\n "key"`` or
    ``"a"\\n "b"``).
    """
    out = _outside_strings(pieces, lambda c: _MISSING_COMMA_RE.sub(r"\1,\2", c))

    fixed: List[Tuple[bool, str]] = []
    for idx, (is_str, chunk) in enumerate(out):
        nxt = out[idx + 1] if idx + 1 < len(out) else None
        prev = out[idx - 1] if idx > 0 else None
        if not is_str and nxt is not None and nxt[0]:
            if re.search(r"[}\]]\s*$", chunk):
                chunk = re.sub(r"([}\]])(\s*)$", r"\1,\2", chunk)
            elif prev is not None and prev[0] and chunk.strip() == "" and "\n" in chunk:
                chunk = "," + chunk
        fixed.append((is_str, chunk))
    return fixed


def _python_literals(chunk: str) -> str:
    chunk = re.sub(r"\bTrue\b", "true", chunk)
    chunk = re.sub(r"\bFalse\b", "false", chunk)
    return re.sub(r"\bNone\b", "null", chunk)


def repair_json(text: str) -> str:
    """
    Apply the fixed repair sequence to *text* (outside string literals),
    after dropping ``//`` comments:

    1. strip trailing commas before ``}`` / ``]``
    2. insert missing commas between adjacent values
    3. quote bare identifier keys
    then Python literals → JSON literals.
    """
    pieces = _split_strings(text)
    pieces = _outside_strings(pieces, lambda c: _COMMENT_RE.sub("", c))
    pieces = _outside_strings(pieces, lambda c: _TRAILING_COMMA_RE.sub(r"\1", c))
    pieces = _insert_missing_commas(pieces)
    pieces = _outside_strings(pieces, lambda c: _BARE_KEY_RE.sub(r'\1"\2"\3', c))
    pieces = _outside_strings(pieces, _python_literals)
    return "".join(chunk for _, chunk in pieces).strip()


def _close_truncated(text: str) -> str:
    """Append the closers a truncated object is missing (string-aware)."""
    stack: List[str] = []
    in_string = False
    escape_next = False
    for ch in text:
        if escape_next:
            escape_next = False
            continue
        if ch == "\\" and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in "{[":
            stack.append("}" if ch == "{" else "]")
        elif ch in "}]" and stack:
            stack.pop()

    if not stack and not in_string:
        return text
    closed = text + ('"' if in_string else "")
    closed = re.sub(r"[,:\s]+$", "", closed)
    return closed + "".join(reversed(stack))


# ---------------------------------------------------------------------------
# Steps 2-3: parse
# ---------------------------------------------------------------------------

def _try_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Locate, parse and (if needed) repair a JSON object in *text*.

    Returns the object, or None if every strategy failed.  Never raises.
    """
    if not text or not text.strip():
        return None

    try:
        candidates = locate_json_candidates(text)
        for candidate in candidates:
            value = _try_object(candidate)
            if value is not None:
                return value

        for candidate in candidates:
            repaired = repair_json(candidate)
            value = _try_object(repaired)
            if value is not None:
                logger.debug("parse_json_object: recovered after repair")
                return value

        for candidate in candidates:
            value = _try_object(_close_truncated(repair_json(candidate)))
            if value is not None:
                logger.debug("parse_json_object: recovered a truncated object")
                return value
    except Exception as exc:
        logger.warning("parse_json_object: unexpected failure: %s", exc)

    return None


# ---------------------------------------------------------------------------
# Step 4: skeleton
# ---------------------------------------------------------------------------

def build_skeleton(text: Optional[str]) -> Dict[str, Any]:
    """Minimal object: startup_name + overview.idea_summary, recovered if possible."""
    raw = text or ""
    name_match = _STARTUP_NAME_RE.search(raw)
    summary_match = _IDEA_SUMMARY_RE.search(raw)
    return {
        "startup_name": name_match.group(1) if name_match else SKELETON_STARTUP_NAME,
        "overview": {
            "idea_summary": summary_match.group(1) if summary_match else SKELETON_IDEA_SUMMARY,
        },
    }


def extract_json(text: Optional[str]) -> Dict[str, Any]:
    """Total extraction: the parsed/repaired object, else the skeleton."""
    value = parse_json_object(text)
    if value is not None:
        return value

    logger.warning(
        "extract_json: all strategies failed, using skeleton. Preview: %s",
        (text or "")[:400],
    )
    return build_skeleton(text)


def is_skeleton(obj: Any) -> bool:
    """True if *obj* has exactly the shape ``build_skeleton`` produces."""
    return (
        isinstance(obj, dict)
        and set(obj) == {"startup_name", "overview"}
        and isinstance(obj["overview"], dict)
        and set(obj["overview"]) == {"idea_summary"}
    )
