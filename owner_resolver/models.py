"""
Pydantic models for owner data — strict typing as our first line of defense.

A ``Person`` cannot be constructed with a name that breaks the shape grammar,
so anything that reaches the timeline is already schema-clean. Owners are
frozen value objects: two owners are equal when their fields are equal.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ─── Name Shape Grammar ─────────────────────────────────────────────

NAME_PATTERN = re.compile(r"^[A-Z][a-z]*([ \-',.][A-Za-z][a-z]*)*$")
MIDDLE_NAME_PATTERN = re.compile(r"^[A-Z][a-zA-Z\s\-',.]*$")


# ─── Enumerations ───────────────────────────────────────────────────


class NameOrder(str, Enum):
    """Token order of a name written without a comma."""

    LAST_FIRST = "last_first"  # "SMITH JOHN A" (assessment-roll format)
    FIRST_LAST = "first_last"  # "John A Smith" (free text)
    AUTO_CONSERVATIVE = "auto_conservative"


class Classification(str, Enum):
    """Verdict of an owner classifier for one fragment."""

    COMPANY = "company"
    PERSON = "person"
    UNCLASSIFIED = "unclassified"


class InvalidReason(str, Enum):
    """Machine-readable reason a fragment was routed to ``invalid_owners``."""

    EMPTY = "empty"
    UNCLASSIFIED = "unclassified"
    ADDRESS_OR_NOISE = "address_or_noise"
    INSUFFICIENT_NAME_PARTS = "insufficient_name_parts"
    FIRST_NAME_PATTERN_MISMATCH = "first_name_pattern_mismatch"
    LAST_NAME_PATTERN_MISMATCH = "last_name_pattern_mismatch"
    MIDDLE_NAME_PATTERN_MISMATCH = "middle_name_pattern_mismatch"
    INVALID_PREFIX = "invalid_prefix"
    INVALID_SUFFIX = "invalid_suffix"
    COULD_NOT_PARSE_PERSON = "could_not_parse_person"


# ─── Input Models ───────────────────────────────────────────────────


class OwnerCandidate(BaseModel):
    """One raw ownership string as scraped, plus the date it belongs to (if any)."""

    raw_text: str
    source_date: Optional[str] = None


class HistoricalTransaction(BaseModel):
    """A recorded transfer: the grantee is owner-of-record as of ``raw_date``."""

    raw_date: Optional[str] = None
    grantee_raw: str


# ─── Owners ─────────────────────────────────────────────────────────


class Person(BaseModel):
    """A natural person. Name fields already title-cased and grammar-checked."""

    model_config = ConfigDict(frozen=True)

    type: Literal["person"] = "person"
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    prefix_name: Optional[str] = None
    suffix_name: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _check_name_shape(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError(f"'{value}' does not match the name shape grammar")
        return value

    @field_validator("middle_name")
    @classmethod
    def _check_middle_shape(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not MIDDLE_NAME_PATTERN.match(value):
            raise ValueError(f"'{value}' does not match the middle name grammar")
        return value


class Company(BaseModel):
    """A legal entity (corporation, trust, association, government body...)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["company"] = "company"
    name: str = Field(min_length=1)


Owner = Annotated[Union[Person, Company], Field(discriminator="type")]


# ─── Audit Trail ────────────────────────────────────────────────────


class InvalidOwnerEntry(BaseModel):
    """A string that could not be confidently turned into an owner."""

    model_config = ConfigDict(frozen=True)

    raw: str
    reason: InvalidReason


# ─── Report ─────────────────────────────────────────────────────────


def owner_record(owner: Person | Company) -> dict:
    """Serialize one owner into its output record.

    ``middle_name`` is always present (null when absent); prefix and suffix
    keys only appear when set.
    """
    if isinstance(owner, Company):
        return {"type": "company", "name": owner.name}
    if isinstance(owner, Person):
        record: dict = {
            "type": "person",
            "first_name": owner.first_name,
            "last_name": owner.last_name,
            "middle_name": owner.middle_name,
        }
        if owner.prefix_name is not None:
            record["prefix_name"] = owner.prefix_name
        if owner.suffix_name is not None:
            record["suffix_name"] = owner.suffix_name
        return record
    raise TypeError(f"Unsupported owner type: {type(owner).__name__}")


class OwnershipReport(BaseModel):
    """The final output of one property run."""

    property_id: str
    owners_by_date: dict[str, list[Owner]] = Field(default_factory=dict)
    invalid_owners: list[InvalidOwnerEntry] = Field(default_factory=list)

    @property
    def current_owners(self) -> list[Person | Company]:
        return list(self.owners_by_date.get("current", []))

    def to_output(self) -> dict:
        """Render the JSON document consumed downstream."""
        return {
            f"property_{self.property_id}": {
                "owners_by_date": {
                    key: [owner_record(o) for o in owners]
                    for key, owners in self.owners_by_date.items()
                },
            },
            "invalid_owners": [
                {"raw": entry.raw, "reason": entry.reason.value}
                for entry in self.invalid_owners
            ],
        }
