"""Normalize backend text into parsed JSON.

Models often wrap JSON in a markdown code fence even when told not to.
An opening fence (optionally tagged ``json``) and a closing fence are
stripped independently, whitespace trimmed, and the remainder parsed.
Nothing is repaired or defaulted: a parse
failure is a MalformedResponseError carrying the raw text.
"""

import json
import logging
import re
from typing import Any

from .errors import MalformedResponseError

logger = logging.getLogger(__name__)

_OPEN_FENCE_RE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\r?\n?", re.IGNORECASE)
_CLOSE_FENCE_RE = re.compile(r"\r?\n?[ \t]*```$")


def strip_code_fence(text: str) -> str:
    """Remove a leading and/or trailing markdown code fence and trim whitespace.

    The two fences are stripped independently, so a truncated reply that
    opens a fence but never closes it still parses.
    """
    stripped = text.strip()
    stripped = _OPEN_FENCE_RE.sub("", stripped, count=1)
    stripped = _CLOSE_FENCE_RE.sub("", stripped, count=1)
    return stripped.strip()


def parse_json_response(text: str) -> Any:
    """Parse backend output as JSON after stripping formatting.

    Args:
        text: Raw text from the backend

    Returns:
        The decoded JSON value

    Raises:
        MalformedResponseError: If the text is not valid JSON
    """
    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug(f"Raw response: {text}")
        raise MalformedResponseError(
            f"Backend returned malformed JSON: {e}",
            raw_text=text,
        ) from e


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse backend output that must be a JSON object."""
    parsed = parse_json_response(text)
    if not isinstance(parsed, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(parsed).__name__}",
            raw_text=text,
        )
    return parsed
