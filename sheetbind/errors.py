from __future__ import annotations

"""Exception hierarchy for sheetbind.

Setup errors abort an operation before any row is read. Row-level problems are
never raised to the caller; they are wrapped in RowError records instead.
"""

__all__ = [
    "SheetBindError",
    "SetupError",
    "SheetNotFoundError",
    "SheetHeaderError",
    "ConfigurationError",
    "ConversionError",
    "RequiredValueError",
    "RowReadError",
    "RecordValidationError",
    "FieldValidationError",
    "StreamAborted",
]


class SheetBindError(Exception):
    """Base class for all sheetbind errors."""


class SetupError(SheetBindError):
    """Raised when an operation cannot start (nothing has been read yet)."""


class SheetNotFoundError(SetupError):
    """Raised when the sheet selector does not match any sheet."""


class SheetHeaderError(SetupError):
    """Raised when the configured header row does not exist."""


class ConfigurationError(SetupError):
    """Raised when required options are missing (stream handler, error column)."""


class ConversionError(SheetBindError, ValueError):
    """Raised when a cell text cannot be converted to the field's kind."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class RequiredValueError(SheetBindError):
    """A required field had no value in its row."""


class RowReadError(SheetBindError):
    """The raw text of a row could not be read from the document."""


class RecordValidationError(SheetBindError):
    """Raised by a validator for record-level failures not tied to one field."""


class StreamAborted(SheetBindError):
    """A stream handler stopped the iteration.

    ``cause`` is the exception raised by the handler and ``errors`` holds the
    row errors collected up to (and including) the aborted row.
    """

    def __init__(self, cause: BaseException, errors: list) -> None:
        super().__init__(f"stream aborted: {cause}")
        self.cause = cause
        self.errors = errors


class FieldValidationError(RecordValidationError):
    """A validator rule failed for one field of a populated record."""

    def __init__(self, message: str, field: str = "", rule: str = "") -> None:
        super().__init__(message)
        self.field = field
        self.rule = rule
