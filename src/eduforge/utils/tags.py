"""JSON extraction from free-form model output.

Model answers frequently wrap JSON in prose or markdown fences. The helpers here recover the
payload from strict to lenient and return None instead of raising.
"""

from __future__ import annotations

import json
import re
from typing import Any

from eduforge.logging import get_logger

logger = get_logger(__name__)


_FENCE_JSON_RE = re.compile(r"```json\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_FENCE_ANY_RE = re.compile(r"```\s*\n?(.*?)\n?```", re.DOTALL)


def _loads(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _bracketed(text: str, open_ch: str, close_ch: str) -> str | None:
    start = text.find(open_ch)
    end = text.rfind(close_ch)
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract_json_payload(text: str) -> Any | None:
    """Extract the first JSON array or object from `text`.

    Strategy (strict to lenient):
        1. A fenced ```json block (or any fenced block) whose body parses.
        2. The whole text, if it parses.
        3. The widest `[...]` span, then the widest `{...}` span.
    """

    if not text:
        return None

    cleaned = text.strip()

    for pattern in (_FENCE_JSON_RE, _FENCE_ANY_RE):
        m = pattern.search(cleaned)
        if m:
            data = _loads(m.group(1).strip())
            if data is not None:
                return data
            logger.debug("extract_json_payload: fenced block did not parse")

    data = _loads(cleaned)
    if data is not None:
        return data

    for open_ch, close_ch in (("[", "]"), ("{", "}")):
        candidate = _bracketed(cleaned, open_ch, close_ch)
        if candidate is None:
            continue
        data = _loads(candidate)
        if data is not None:
            return data

    logger.debug("extract_json_payload: no JSON payload found")
    return None
