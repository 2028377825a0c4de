# src/llm/response_parser.py - v1
"""Parse provider replies that may be wrapped in a markdown code fence."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ResponseParseError(ValueError):
    """Raised when a provider reply is not the JSON shape we asked for."""


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_json_response(text: str, expect: type = dict) -> Any:
    """Decode a (possibly fenced) JSON reply and check its top-level type.

    Raises:
        ResponseParseError: On empty body, invalid JSON or wrong JSON shape.
    """
    cleaned = strip_code_fence(text)
    if not cleaned:
        raise ResponseParseError("empty response body")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug("Raw response: %s", (text or "")[:500])
        raise ResponseParseError(f"invalid JSON in response: {e}") from e
    if not isinstance(data, expect):
        raise ResponseParseError(
            f"expected JSON {expect.__name__}, got {type(data).__name__}"
        )
    return data
