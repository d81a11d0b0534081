"""
Display helpers shared by normalization and rendering.
"""
from __future__ import annotations

import re
from typing import Any

_WS_RE = re.compile(r"\s+")


def scalar_text(value: Any) -> str:
    """Render a canonical scalar for print: 1500.0 -> "1500", True -> "Yes", None -> ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def has_value(value: Any) -> bool:
    """True for anything except None and the empty string."""
    return value is not None and value != ""


def collapse_whitespace(text: str, joiner: str = " ") -> str:
    return _WS_RE.sub(joiner, text.strip())


AFFIRMATIVE_TOKENS = frozenset({"yes", "true"})
NEGATIVE_TOKENS = frozenset({"no", "false"})


def is_affirmative_value(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in AFFIRMATIVE_TOKENS
    return False


def is_negative_value(value: Any) -> bool:
    if isinstance(value, bool):
        return not value
    if isinstance(value, str):
        return value.strip().lower() in NEGATIVE_TOKENS
    return False
