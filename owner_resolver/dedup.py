"""
Owner deduplication within one date bucket.

The same owner routinely shows up twice on one page (once in the owner block,
once on the mailing line). The identity key is only ever compared, never shown.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import Company, Person
from .normalizer import collapse_whitespace

logger = logging.getLogger(__name__)


def owner_key(owner: Person | Company) -> str:
    """Identity key: lower-cased, whitespace-normalized name.

    Persons key on ``first middle last``; prefix and suffix do not count.
    """
    if isinstance(owner, Company):
        return collapse_whitespace(owner.name).lower()
    parts = [owner.first_name, owner.middle_name, owner.last_name]
    return collapse_whitespace(" ".join(p for p in parts if p)).lower()


def merge_owners(
    existing: list[Person | Company], incoming: Iterable[Person | Company]
) -> list[Person | Company]:
    """Append ``incoming`` owners whose key is not already present. First seen wins."""
    merged = list(existing)
    seen = {owner_key(o) for o in merged}
    for owner in incoming:
        key = owner_key(owner)
        if key in seen:
            logger.debug("Discarding duplicate owner '%s'", key)
            continue
        seen.add(key)
        merged.append(owner)
    return merged


def dedupe_owners(owners: Iterable[Person | Company]) -> list[Person | Company]:
    return merge_owners([], owners)
