"""Parsers for semi-structured model output.

Models asked for JSON often wrap it in prose or code fences, and models asked
for a number sometimes add words. These helpers never raise on bad input.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_LEADING_INT_PATTERN = re.compile(r"[+-]?\d+")

GRADE_MIN = -100
GRADE_MAX = 100


@dataclass(frozen=True)
class StructuredReply:
    """Reply plus rationale from structured-reasoning mode."""

    response: str
    reasoning: str


def parse_json_response(text: str | None) -> dict[str, Any] | None:
    """Parse a JSON object from model output.

    Tries the whole text first, then the outermost ``{...}`` span.

    Returns:
        The decoded object, or None when no JSON object can be recovered.
    """
    if not text:
        return None

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    match = _JSON_OBJECT_PATTERN.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.debug("No parseable JSON object in model output")
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_structured_reply(text: str | None) -> StructuredReply | None:
    """Pull ``{"response", "reasoning"}`` out of model output."""
    parsed = parse_json_response(text)
    if parsed is None or not isinstance(parsed.get("response"), str):
        return None
    reasoning = parsed.get("reasoning")
    return StructuredReply(
        response=parsed["response"],
        reasoning=reasoning if isinstance(reasoning, str) else "",
    )


def parse_grade(text: str | None) -> int:
    """Read an integer grade from model output.

    Leading whitespace is ignored and trailing text after the number is
    dropped. Non-numeric output yields 0; numbers are clamped to [-100, 100].
    """
    if not text:
        return 0
    match = _LEADING_INT_PATTERN.match(text.strip())
    if not match:
        return 0
    return max(GRADE_MIN, min(GRADE_MAX, int(match.group(0))))
