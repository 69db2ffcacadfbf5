"""
Joint-owner splitting: "JOHN & MARY SMITH" → ["JOHN", "MARY SMITH"].

Two kinds of separator are involved:

  list separators   per-source extras (``;`` and ``/`` by default). They always
                    separate owners, so they are cut first.
  joint separators  ``&`` and the word AND. Company names use these too.

Each list-separated piece is classified whole before it is split on the joint
separators. A piece the classifier already accepts as a company is never
split, otherwise "SMITH AND SONS INC" would turn into two fake persons.
"""

from __future__ import annotations

import re

from .classifier import OwnerClassifier
from .models import Classification
from .normalizer import collapse_whitespace

_JOINT_SEPARATOR_RE = re.compile(r"\s*(?:&|\bAND\b)\s*", re.IGNORECASE)


def build_separator_pattern(
    extra_separators: tuple[str, ...] = (";", "/"),
) -> re.Pattern[str] | None:
    """Pattern for the per-source list separators, or None when there are none."""
    alternatives = [re.escape(s) for s in extra_separators if s]
    if not alternatives:
        return None
    return re.compile(r"\s*(?:" + "|".join(alternatives) + r")\s*")


_DEFAULT_SEPARATOR_RE = build_separator_pattern()


def split_joint_owners(
    text: str,
    classifier: OwnerClassifier,
    separator_re: re.Pattern[str] | None = _DEFAULT_SEPARATOR_RE,
) -> list[str]:
    """Split a normalized ownership string into owner fragments.

    Example:
        "SMITH JOHN; ACME HOLDINGS LLC & SONS; MARY"
        → ["SMITH JOHN", "ACME HOLDINGS LLC & SONS", "MARY"]

    Returns:
        1..N non-empty fragments for non-empty input, ``[]`` for empty input.
    """
    s = collapse_whitespace(text)
    if not s:
        return []

    pieces = separator_re.split(s) if separator_re is not None else [s]
    fragments: list[str] = []
    for piece in pieces:
        piece = _clean_fragment(piece)
        if not piece:
            continue
        if classifier.classify(piece) is Classification.COMPANY:
            fragments.append(piece)
            continue
        parts = (_clean_fragment(p) for p in _JOINT_SEPARATOR_RE.split(piece))
        fragments.extend(p for p in parts if p)
    return fragments or [s]


def _clean_fragment(text: str) -> str:
    return collapse_whitespace(text).strip(" ,")
