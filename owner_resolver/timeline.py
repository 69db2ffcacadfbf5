"""
Ownership timeline assembly.

Key order of the finished timeline:

    1999-01-01, 2020-05-01, ...   real dates, ascending
    unknown_date_1, ...           unparseable dates, in the order met
    current                       always present, always last

When nothing could be resolved for ``current``, the owners of the most recent
REAL date stand in. Synthetic buckets never do: their place in time is unknown.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from .dates import is_iso_date_key, parse_date_to_iso
from .dedup import merge_owners
from .models import Company, Person

logger = logging.getLogger(__name__)

CURRENT_KEY = "current"
UNKNOWN_DATE_PREFIX = "unknown_date_"
_UNKNOWN_KEY_RE = re.compile(r"^unknown_date_\d+$")


class OwnershipTimeline:
    """Date-keyed owner buckets for one property.

    Usage:
        timeline = OwnershipTimeline()
        key = timeline.assign_date_key("03/15/2019")   # "2019-03-15"
        timeline.add(key, owners)
        timeline.add("current", current_owners)
        timeline.to_dict()
    """

    def __init__(self) -> None:
        self._dated: dict[str, list[Person | Company]] = {}
        self._unknown: dict[str, list[Person | Company]] = {}
        self._current: list[Person | Company] = []
        self._unknown_counter = 0

    # ─── Building ────────────────────────────────────────────────────

    def assign_date_key(self, raw_date: str | None) -> str:
        """ISO key for a parseable date, else the next ``unknown_date_N``."""
        iso = parse_date_to_iso(raw_date)
        if iso is not None:
            return iso
        self._unknown_counter += 1
        key = f"{UNKNOWN_DATE_PREFIX}{self._unknown_counter}"
        logger.debug("Unparseable date %r assigned to %s", raw_date, key)
        return key

    def add(self, key: str, owners: Iterable[Person | Company] = ()) -> None:
        """Merge owners into a bucket, creating it if needed.

        Raises:
            ValueError: ``key`` is not an ISO date, a synthetic key, or "current".
        """
        if key == CURRENT_KEY:
            self._current = merge_owners(self._current, owners)
        elif _UNKNOWN_KEY_RE.match(key):
            self._unknown[key] = merge_owners(self._unknown.get(key, []), owners)
        elif is_iso_date_key(key):
            self._dated[key] = merge_owners(self._dated.get(key, []), owners)
        else:
            raise ValueError(f"Invalid timeline key: '{key}'")

    # ─── Reading ─────────────────────────────────────────────────────

    def ordered_keys(self) -> list[str]:
        return sorted(self._dated) + list(self._unknown) + [CURRENT_KEY]

    def latest_dated_owners(self) -> list[Person | Company]:
        """Owners of the most recent real date, or [] when there is none."""
        if not self._dated:
            return []
        return list(self._dated[max(self._dated)])

    def current_owners(self) -> list[Person | Company]:
        """Current owners, falling back to the latest real transaction."""
        if self._current:
            return list(self._current)
        fallback = self.latest_dated_owners()
        if fallback:
            logger.info(
                "No current owners resolved — using %d owner(s) from %s",
                len(fallback), max(self._dated),
            )
        return fallback

    def to_dict(self) -> dict[str, list[Person | Company]]:
        result: dict[str, list[Person | Company]] = {}
        for key in self.ordered_keys():
            if key == CURRENT_KEY:
                result[key] = self.current_owners()
            elif key in self._unknown:
                result[key] = list(self._unknown[key])
            else:
                result[key] = list(self._dated[key])
        return result
