"""
Exception taxonomy for the inspection sync engine.

Malformed remote shapes and duplicate submissions are deliberately absent:
the first is recovered locally, the second is ignored at the guard.
"""

from __future__ import annotations


class InspectionSyncError(Exception):
    """Base class for every error raised by the engine."""


class TransportError(InspectionSyncError):
    """Network unreachable or a non-2xx response from the remote store."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ValidationFailed(InspectionSyncError):
    """A required field is missing at submission time.

    ``str(exc)`` is the operator-facing message naming the first offending field.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class SectionNotLoaded(InspectionSyncError):
    """A section session was edited before ``open()`` produced its state."""


class AssetUnavailable(InspectionSyncError):
    """A locally captured asset could not be read for upload."""

    def __init__(self, uri: str, reason: str = ""):
        super().__init__(f"Could not read {uri}" + (f": {reason}" if reason else ""))
        self.uri = uri


class SectionReadOnly(InspectionSyncError):
    """The section is kept as a local draft only; the server has no write for it."""
