"""Audit trail of strings that could not be turned into owners."""

from __future__ import annotations

import logging

from .models import InvalidOwnerEntry, InvalidReason

logger = logging.getLogger(__name__)


class InvalidOwnerCollector:
    """Append-only list of ``(raw, reason)`` entries, each recorded once."""

    def __init__(self) -> None:
        self._entries: list[InvalidOwnerEntry] = []
        self._seen: set[tuple[str, InvalidReason]] = set()

    def add(self, raw: str, reason: InvalidReason) -> None:
        if (raw, reason) in self._seen:
            return
        self._seen.add((raw, reason))
        self._entries.append(InvalidOwnerEntry(raw=raw, reason=reason))
        logger.debug("Invalid owner '%s': %s", raw, reason.value)

    @property
    def entries(self) -> list[InvalidOwnerEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
