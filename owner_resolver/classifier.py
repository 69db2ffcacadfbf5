"""
Owner classification — Company, Person candidate, or Unclassified.

Classification is data-driven: the keyword table comes from ``ResolverConfig``
and is compiled once per classifier. Any object with a matching ``classify``
method can stand in for ``KeywordClassifier`` (see ``classifier_llm.py``).

Keywords are anchored with lookarounds instead of a plain substring test, so
"TR" never fires inside "PETRILLO" and dotted forms such as "L.L.C." still
match at the end of a string.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from .config import ResolverConfig
from .models import Classification

logger = logging.getLogger(__name__)


# ─── Address / Noise Patterns ────────────────────────────────────────

_ZIP_ONLY_RE = re.compile(r"^\d{5}(?:-\d{4})?$")
_NUMERIC_ONLY_RE = re.compile(r"^[\d\s\-/#.,]+$")
_PO_BOX_RE = re.compile(r"\bP\.?\s*O\.?\s*BOX\b|\bPOST\s+OFFICE\s+BOX\b", re.IGNORECASE)
_STREET_LINE_RE = re.compile(
    r"^\d+[A-Z]?\s+.*\b(?:ST|STREET|AVE|AVENUE|BLVD|BOULEVARD|RD|ROAD|DR|DRIVE|LN|LANE"
    r"|CT|COURT|WAY|HWY|HIGHWAY|PKWY|PARKWAY|PL|PLACE|TRL|TRAIL|CIR|CIRCLE|TER|TERRACE"
    r"|UNIT|APT|SUITE|STE)\b",
    re.IGNORECASE,
)
_CITY_STATE_ZIP_RE = re.compile(r"\b[A-Z]{2}\s+\d{5}(?:-\d{4})?$", re.IGNORECASE)
_HAS_LETTER_RE = re.compile(r"[A-Za-z]")
_HAS_DIGIT_RE = re.compile(r"\d")


# ─── Capability Interface ────────────────────────────────────────────


class OwnerClassifier(Protocol):
    """Anything that can sort a fragment into Company / Person / Unclassified."""

    def classify(self, text: str) -> Classification: ...


# ─── Keyword Classifier ──────────────────────────────────────────────


def compile_keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    """Build one alternation matching any keyword as a whole word.

    Longer keywords are tried first so "L.L.C." wins over "L.L.C".
    """
    alternatives = [
        r"\s+".join(re.escape(part) for part in keyword.split())
        for keyword in sorted(set(keywords), key=len, reverse=True)
        if keyword.strip()
    ]
    return re.compile(
        r"(?<![A-Za-z0-9])(?:" + "|".join(alternatives) + r")(?![A-Za-z0-9])",
        re.IGNORECASE,
    )


class KeywordClassifier:
    """Rule-based classifier driven by the configured keyword and suffix tables.

    Usage:
        classifier = KeywordClassifier(ResolverConfig())
        classifier.classify("ACME HOLDINGS LLC")   # Classification.COMPANY
        classifier.classify("SMITH JOHN")          # Classification.PERSON
    """

    def __init__(self, config: ResolverConfig | None = None):
        self.config = config or ResolverConfig()
        self._keyword_re = compile_keyword_pattern(self.config.company_keywords)

    def is_company_keyword_match(self, text: str) -> bool:
        return bool(self._keyword_re.search(text))

    def classify(self, text: str) -> Classification:
        if not text or not _HAS_LETTER_RE.search(text):
            return Classification.UNCLASSIFIED

        if self.is_company_keyword_match(text):
            return Classification.COMPANY

        # The digit check runs on what is left after suffix tokens are removed,
        # so "JOHN SMITH 3RD" is still a person.
        if self._digits_suggest_company(text):
            logger.debug("Digit heuristic classified '%s' as company", text)
            return Classification.COMPANY

        return Classification.PERSON

    def _digits_suggest_company(self, text: str) -> bool:
        tokens = text.replace(",", " ").split()
        remaining = [t for t in tokens if _suffix_key(t) not in self.config.suffixes]
        if not _HAS_DIGIT_RE.search(" ".join(remaining)):
            return False
        if self.config.digits_imply_company:
            return True
        return len(tokens) >= 3 and text == text.upper()


# ─── Noise Filter ────────────────────────────────────────────────────


def looks_like_address_or_noise(text: str) -> bool:
    """True for mailing-address lines and numeric debris, not owner names.

    Examples:
        "123 MAIN ST"          → True
        "PO BOX 1234"          → True
        "GAINESVILLE FL 32601" → True
        "SMITH JOHN"           → False
    """
    t = text.strip()
    if not t:
        return False
    return bool(
        _ZIP_ONLY_RE.match(t)
        or _NUMERIC_ONLY_RE.match(t)
        or _PO_BOX_RE.search(t)
        or _STREET_LINE_RE.match(t)
        or _CITY_STATE_ZIP_RE.search(t)
    )


def _suffix_key(token: str) -> str:
    return token.upper().replace(".", "")
