"""Exception hierarchy for CodeTrack."""

from __future__ import annotations

__all__ = [
    "CodeTrackError",
    "StorageUnavailableError",
    "StartupError",
    "ItemValidationError",
]


class CodeTrackError(Exception):
    """Base class for all application errors."""


class StorageUnavailableError(CodeTrackError):
    """Raised when no durable preference store can be used.

    Detected once, before any session side effects take place.
    """


class StartupError(CodeTrackError):
    """Raised when the initial item load fails (fatal, never retried)."""


class ItemValidationError(CodeTrackError, ValueError):
    """Raised when tracked item fields fail validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
