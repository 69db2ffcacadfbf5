"""
Custom exception hierarchy for owner resolution.

Only HARD errors live here — failures that make the whole property run
meaningless (no property identifier, a structurally broken source document).
Soft errors (a fragment that is not a recognisable name) never raise; they are
recorded in ``invalid_owners`` with a reason code instead.
"""

from __future__ import annotations


class OwnerResolutionError(Exception):
    """Base exception for all hard owner-resolution failures."""

    def __init__(
        self,
        code: str,
        message: str,
        path: str | None = None,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.path = path
        self.details = details or {}
        super().__init__(message)

    def to_error_object(self) -> dict:
        """Structured error surfaced by the CLI and the API."""
        return {"type": "error", "message": self.message, "path": self.path}


class MissingPropertyIdentifierError(OwnerResolutionError):
    """The source could not supply a property identifier."""

    def __init__(
        self, message: str, path: str | None = "property_id", details: dict | None = None
    ):
        super().__init__("MISSING_PROPERTY_ID", message, path, details)


class MalformedSourceError(OwnerResolutionError):
    """The source document does not have the expected structure."""

    def __init__(self, message: str, path: str | None = None, details: dict | None = None):
        super().__init__("MALFORMED_SOURCE", message, path, details)
