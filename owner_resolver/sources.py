"""
Candidate sources — where the raw ownership strings come from.

Fetching pages and walking the DOM is somebody else's job. The engine only
needs the three calls of ``CandidateSource``. ``JsonCandidateSource`` is the
one implementation shipped here: a flat JSON document written by an upstream
scraper, checked with pydantic before anything reads it.

    {
      "property_id": "12-34-56-7890",
      "current_owners": ["SMITH JOHN A & MARY B"],
      "transactions": [{"date": "03/15/2019", "grantee": "SMITH JOHN A"}]
    }
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, Field, ValidationError

from .exceptions import MalformedSourceError, MissingPropertyIdentifierError
from .models import HistoricalTransaction


# ─── Capability Interface ────────────────────────────────────────────


class CandidateSource(Protocol):
    def get_current_owner_candidates(self) -> Sequence[str]: ...

    def get_historical_transactions(self) -> Sequence[HistoricalTransaction]: ...

    def get_property_identifier(self) -> str: ...


# ─── JSON Document Schema ────────────────────────────────────────────


class TransactionIn(BaseModel):
    date: Optional[str] = None
    grantee: str


class SourceDocument(BaseModel):
    property_id: Optional[Union[str, int]] = None
    current_owners: list[str] = Field(default_factory=list)
    transactions: list[TransactionIn] = Field(default_factory=list)


# ─── JSON Source ─────────────────────────────────────────────────────


class JsonCandidateSource:
    """``CandidateSource`` over an already-decoded JSON document.

    Raises:
        MalformedSourceError: The document does not match ``SourceDocument``.
    """

    def __init__(self, document: Any):
        try:
            self.document = SourceDocument.model_validate(document)
        except ValidationError as e:
            first = e.errors()[0]
            path = ".".join(str(part) for part in first["loc"]) or None
            raise MalformedSourceError(
                f"Malformed source document: {first['msg']}",
                path=path,
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    @classmethod
    def from_file(cls, path: str | Path) -> JsonCandidateSource:
        resolved = Path(path)
        try:
            with resolved.open(encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedSourceError(
                f"Source file is not valid JSON: {e.msg} (line {e.lineno})",
                path=str(resolved),
            ) from e
        return cls(document)

    def get_current_owner_candidates(self) -> Sequence[str]:
        return list(self.document.current_owners)

    def get_historical_transactions(self) -> Sequence[HistoricalTransaction]:
        return [
            HistoricalTransaction(raw_date=t.date, grantee_raw=t.grantee)
            for t in self.document.transactions
        ]

    def get_property_identifier(self) -> str:
        property_id = str(self.document.property_id or "").strip()
        if not property_id:
            raise MissingPropertyIdentifierError(
                "Source document has no property identifier"
            )
        return property_id
