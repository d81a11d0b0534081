"""
Date coercion for extracted form values.

Handwritten intake forms mostly carry mm/dd/yy.  Values are rewritten to ISO
``YYYY-MM-DD`` when they parse to a real calendar date; anything else is
returned exactly as received.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)

_FULL_MONTHS = (
    "January|February|March|April|May|June|July|August"
    "|September|October|November|December"
)
_ABBREV_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec"

_MONTH_MAP = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4,
    "jun": 6, "jul": 7, "aug": 8, "sep": 9, "sept": 9,
    "oct": 10, "nov": 11, "dec": 12,
}

# MM/DD/YY, MM/DD/YYYY (slash or dash)
_NUMERIC_MDY_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2}|\d{4})$")
# YYYY-MM-DD, optionally followed by a time component
_ISO_RE = re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})(?:[T ].*)?$")
# March 4, 2025 / Mar 4th 2025
_MONTH_FIRST_RE = re.compile(
    rf"^({_FULL_MONTHS}|{_ABBREV_MONTHS})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{2}}|\d{{4}})$",
    re.IGNORECASE,
)
# 4 March 2025
_DAY_FIRST_RE = re.compile(
    rf"^(\d{{1,2}})\s+({_FULL_MONTHS}|{_ABBREV_MONTHS})\.?,?\s+(\d{{2}}|\d{{4}})$",
    re.IGNORECASE,
)


def expand_two_digit_year(year: int, today: date | None = None) -> int:
    """
    Expand a two-digit year relative to *today*.

    Years above the current two-digit year belong to the previous century,
    everything else to the current one (2025: "25" -> 2025, "99" -> 1999).
    """
    today = today or date.today()
    century = (today.year // 100) * 100
    if year > today.year % 100:
        return century - 100 + year
    return century + year


def _year(token: str, today: date | None) -> int:
    value = int(token)
    if len(token) == 2:
        return expand_two_digit_year(value, today)
    return value


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_date_parts(text: str, today: date | None = None) -> str | None:
    """Return the ISO form of *text*, or None when it is not a recognizable date."""
    text = text.strip()
    if not text:
        return None

    m = _NUMERIC_MDY_RE.match(text)
    if m:
        return _iso(_year(m.group(3), today), int(m.group(1)), int(m.group(2)))

    m = _ISO_RE.match(text)
    if m:
        return _iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _MONTH_FIRST_RE.match(text)
    if m:
        month = _MONTH_MAP[m.group(1).lower()]
        return _iso(_year(m.group(3), today), month, int(m.group(2)))

    m = _DAY_FIRST_RE.match(text)
    if m:
        month = _MONTH_MAP[m.group(2).lower()]
        return _iso(_year(m.group(3), today), month, int(m.group(1)))

    return None


def normalize_date(value: Any, today: date | None = None) -> Any:
    """
    ISO-normalize a date-like value.  Never raises.

    Strings that do not parse (or parse to an impossible date such as 02/30/24)
    are returned unchanged, as are non-string values.
    """
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return value
    iso = parse_date_parts(value, today)
    if iso is None:
        if value.strip():
            logger.debug(f"Leaving unparseable date {value!r} as-is")
        return value
    return iso
