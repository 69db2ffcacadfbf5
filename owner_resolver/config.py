"""
Resolver configuration — the static lookup tables and per-source knobs.

The tables below are built once at import time and never mutated. They are
injected into the classifier and parser through ``ResolverConfig`` so that a
jurisdiction with different conventions can override them from a JSON file
without touching code.

Source profiles exist because different record sources write two-token names
in different orders ("SMITH JOHN" on assessment rolls, "John Smith" in free
text). Each source keeps its own ordering instead of one unified guess.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .models import NameOrder

logger = logging.getLogger(__name__)


# ─── Company Keywords ───────────────────────────────────────────────
# Matched case-insensitively and anchored on word boundaries. Multi-word
# entries match across any run of whitespace.

LEGAL_SUFFIX_KEYWORDS: tuple[str, ...] = (
    "INC", "INC.", "INCORPORATED",
    "LLC", "L.L.C.", "L.L.C", "PLLC",
    "LTD", "LTD.", "LIMITED",
    "CORP", "CORP.", "CORPORATION",
    "CO", "CO.", "COMPANY",
    "TRUST",
    "LP", "L.P.", "LLP", "LLLP",
    "PC", "P.C.", "PA", "P.A.", "PLC",
    "N.A.",
)

ENTITY_KEYWORDS: tuple[str, ...] = (
    "ASSOCIATION", "ASSN", "ASSOC", "ASSOCIATES",
    "BANK", "CREDIT UNION", "MORTGAGE",
    "REALTY", "PROPERTIES",
    "HOLDINGS", "HOLDING",
    "MANAGEMENT", "MGMT",
    "PARTNERS", "PARTNERSHIP",
    "INVESTMENTS", "INVESTMENT", "VENTURES", "CAPITAL",
    "ENTERPRISES", "GROUP",
    "FOUNDATION", "FUND",
    "DEVELOPMENT", "DEVELOPERS", "BUILDERS", "CONSTRUCTION",
    "SERVICES", "SOLUTIONS",
    "HOMEOWNERS", "HOA", "CONDOMINIUM",
    "CHURCH", "MINISTRIES", "DIOCESE",
    "SCHOOL", "UNIVERSITY", "COLLEGE",
    "DISTRICT", "AUTHORITY", "COMMISSION", "DEPARTMENT", "DEPT",
    "STATE OF", "COUNTY OF", "CITY OF", "TOWN OF", "UNITED STATES",
)

DEFAULT_COMPANY_KEYWORDS: tuple[str, ...] = LEGAL_SUFFIX_KEYWORDS + ENTITY_KEYWORDS


# ─── Suffixes and Prefixes ──────────────────────────────────────────
# Keys are upper-cased with periods removed; values are the display forms.

DEFAULT_SUFFIXES: dict[str, str] = {
    "JR": "Jr.", "JUNIOR": "Jr.",
    "SR": "Sr.", "SENIOR": "Sr.",
    "II": "II", "2ND": "II",
    "III": "III", "3RD": "III",
    "IV": "IV", "4TH": "IV",
    "PHD": "PhD",
    "MD": "MD",
    "ESQ": "Esq.", "ESQUIRE": "Esq.",
    "JD": "JD",
    "LLM": "LLM",
    "MBA": "MBA",
    "RN": "RN",
    "DDS": "DDS",
    "DVM": "DVM",
    "CFA": "CFA",
    "CPA": "CPA",
    "PE": "PE",
    "PMP": "PMP",
    "EMERITUS": "Emeritus",
    "RET": "Ret.", "RETIRED": "Ret.",
}

DEFAULT_PREFIXES: dict[str, str] = {
    "MR": "Mr.",
    "MRS": "Mrs.",
    "MS": "Ms.",
    "MISS": "Miss",
    "MX": "Mx.",
    "DR": "Dr.",
    "PROF": "Prof.",
    "REV": "Rev.",
    "FR": "Fr.",
    "BR": "Br.",
    "CAPT": "Capt.",
    "COL": "Col.",
    "MAJ": "Maj.",
    "LT": "Lt.",
    "SGT": "Sgt.",
    "HON": "Hon.",
    "JUDGE": "Judge",
    "RABBI": "Rabbi",
    "IMAM": "Imam",
    "SHEIKH": "Sheikh",
    "SIR": "Sir",
    "DAME": "Dame",
}


# ─── Configuration Model ────────────────────────────────────────────


class ResolverConfig(BaseModel):
    """Immutable configuration for one resolver instance."""

    model_config = ConfigDict(frozen=True)

    name_order: NameOrder = NameOrder.AUTO_CONSERVATIVE
    company_keywords: tuple[str, ...] = DEFAULT_COMPANY_KEYWORDS
    suffixes: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SUFFIXES))
    prefixes: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PREFIXES))
    extra_separators: tuple[str, ...] = (";", "/")
    digits_imply_company: bool = False

    @property
    def suffix_display_forms(self) -> frozenset[str]:
        return frozenset(self.suffixes.values())

    @property
    def prefix_display_forms(self) -> frozenset[str]:
        return frozenset(self.prefixes.values())


SOURCE_PROFILES: dict[str, dict[str, Any]] = {
    "auto": {"name_order": NameOrder.AUTO_CONSERVATIVE},
    "roll_format": {"name_order": NameOrder.LAST_FIRST},
    "free_text": {"name_order": NameOrder.FIRST_LAST},
    # Sources that treat any digit-bearing fragment as an entity.
    "roll_format_digit_company": {
        "name_order": NameOrder.LAST_FIRST,
        "digits_imply_company": True,
    },
}

DEFAULT_PROFILE = "auto"


# ─── Public API ──────────────────────────────────────────────────────


def load_config(
    path: str | Path | None = None, profile: str | None = None
) -> ResolverConfig:
    """Build a ``ResolverConfig`` from a profile plus an optional JSON override file.

    Args:
        path: JSON file whose keys override profile values. Falls back to
            ``OWNER_RESOLVER_CONFIG`` when omitted.
        profile: Name from ``SOURCE_PROFILES``. Falls back to
            ``OWNER_RESOLVER_PROFILE``, then ``"auto"``.

    ``OWNER_RESOLVER_NAME_ORDER`` overrides the ordering last of all.

    Raises:
        KeyError: Unknown profile name.
        pydantic.ValidationError: Override values of the wrong shape.
    """
    profile = profile or os.environ.get("OWNER_RESOLVER_PROFILE") or DEFAULT_PROFILE
    if profile not in SOURCE_PROFILES:
        raise KeyError(
            f"Unknown source profile '{profile}'. "
            f"Expected one of: {', '.join(sorted(SOURCE_PROFILES))}"
        )
    values: dict[str, Any] = dict(SOURCE_PROFILES[profile])

    override_path = path if path is not None else os.environ.get("OWNER_RESOLVER_CONFIG")
    if override_path:
        with Path(override_path).open(encoding="utf-8") as f:
            overrides: dict[str, Any] = json.load(f)
        logger.info("Loaded resolver overrides from %s", override_path)
        values.update(overrides)

    env_order = os.environ.get("OWNER_RESOLVER_NAME_ORDER")
    if env_order:
        values["name_order"] = env_order

    return ResolverConfig.model_validate(values)
