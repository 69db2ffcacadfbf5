"""
Deterministic name-shape validation — the "paranoid" layer.

These validators run PURE CODE checks on parsed name fields. They never
repair a name: a field that does not fit the grammar rejects the whole
fragment, with a reason code for the audit trail.

Each validator function:
  - Takes the value to check (plus the config where a table is needed)
  - Returns a list of InvalidReason codes (empty = all clear)
  - Is independently testable

The validate_all() function runs every check and aggregates the reasons.
"""

from __future__ import annotations

from typing import Optional

from .config import ResolverConfig
from .models import MIDDLE_NAME_PATTERN, NAME_PATTERN, InvalidReason, Person
from .name_parser import ParsedName


# ─── Orchestrator ────────────────────────────────────────────────────


def validate_all(parsed: ParsedName, config: ResolverConfig | None = None) -> list[InvalidReason]:
    """Run ALL name checks, in field order first → last → middle → prefix → suffix."""
    config = config or ResolverConfig()
    reasons: list[InvalidReason] = []
    reasons.extend(validate_first_name(parsed.first_name))
    reasons.extend(validate_last_name(parsed.last_name))
    reasons.extend(validate_middle_name(parsed.middle_name))
    reasons.extend(validate_prefix(parsed.prefix_name, config))
    reasons.extend(validate_suffix(parsed.suffix_name, config))
    return reasons


def build_person(parsed: ParsedName, config: ResolverConfig | None = None) -> Person | InvalidReason:
    """Validate a parsed name and build the ``Person``, or return the first reason it fails."""
    reasons = validate_all(parsed, config)
    if reasons:
        return reasons[0]
    return Person(
        first_name=parsed.first_name,
        last_name=parsed.last_name,
        middle_name=parsed.middle_name,
        prefix_name=parsed.prefix_name,
        suffix_name=parsed.suffix_name,
    )


# ─── Individual Validators ───────────────────────────────────────────


def validate_first_name(name: str) -> list[InvalidReason]:
    """First names must be one capitalised word or separator-joined words."""
    if not name or not NAME_PATTERN.match(name):
        return [InvalidReason.FIRST_NAME_PATTERN_MISMATCH]
    return []


def validate_last_name(name: str) -> list[InvalidReason]:
    """Same grammar as first names: "Smith", "O'Brien", "Van Dyke", "Smith-Jones"."""
    if not name or not NAME_PATTERN.match(name):
        return [InvalidReason.LAST_NAME_PATTERN_MISMATCH]
    return []


def validate_middle_name(name: Optional[str]) -> list[InvalidReason]:
    """Middle names are optional; when present they may mix case after the first letter."""
    if name is None:
        return []
    if not MIDDLE_NAME_PATTERN.match(name):
        return [InvalidReason.MIDDLE_NAME_PATTERN_MISMATCH]
    return []


def validate_prefix(prefix: Optional[str], config: ResolverConfig) -> list[InvalidReason]:
    if prefix is not None and prefix not in config.prefix_display_forms:
        return [InvalidReason.INVALID_PREFIX]
    return []


def validate_suffix(suffix: Optional[str], config: ResolverConfig) -> list[InvalidReason]:
    if suffix is not None and suffix not in config.suffix_display_forms:
        return [InvalidReason.INVALID_SUFFIX]
    return []
