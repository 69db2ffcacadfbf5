"""
Transaction date parsing — locale-formatted sale dates to ISO 8601.

Strict: a string that is not a real calendar date in one of the
known layouts returns None (the transaction then lands in an
``unknown_date_N`` bucket). We never guess a day or a month.
"""

from __future__ import annotations

import re
from datetime import datetime

from .normalizer import collapse_whitespace

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_ISO_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$")
_ORDINAL_DAY_RE = re.compile(r"(\d)(?:st|nd|rd|th)\b", re.IGNORECASE)

_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m.%d.%Y",
    "%m/%d/%y",
    "%m-%d-%y",
    "%Y/%m/%d",
    "%Y%m%d",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d-%b-%Y",
    "%d-%b-%y",
)


def parse_date_to_iso(raw: str | None) -> str | None:
    """Convert a raw sale date to ``YYYY-MM-DD``.

    Examples:
        "03/15/2019"        → "2019-03-15"
        "2019-03-15T00:00"  → "2019-03-15"
        "March 5th, 2001"   → "2001-03-05"
        "02/30/2019"        → None
        "N/A"               → None
    """
    s = collapse_whitespace(raw)
    if not s:
        return None

    iso = _ISO_PREFIX_RE.match(s)
    if iso:
        return _checked(iso.group(1), "%Y-%m-%d")

    s = _ORDINAL_DAY_RE.sub(r"\1", s).replace("Sept ", "Sep ")
    for fmt in _FORMATS:
        result = _checked(s, fmt)
        if result:
            return result
    return None


def is_iso_date_key(key: str) -> bool:
    return bool(ISO_DATE_RE.match(key)) and _checked(key, "%Y-%m-%d") is not None


def _checked(value: str, fmt: str) -> str | None:
    try:
        return datetime.strptime(value, fmt).date().isoformat()
    except ValueError:
        return None
