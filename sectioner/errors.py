from __future__ import annotations


class SectionerError(Exception):
    """Base class for errors surfaced to callers of the distribution engine."""


class InputValidationError(SectionerError):
    """Raised when distribution inputs are missing or invalid; the engine does not run."""


class NotFoundError(SectionerError):
    """Raised by the roster store when a referenced class or student does not exist."""


class CommitError(SectionerError):
    """Raised after a failed commit has been rolled back."""
