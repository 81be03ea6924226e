from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "ValidationFailure",
    "Validator",
]


@dataclass(frozen=True)
class ValidationFailure:
    """One failed rule: offending field, rule name and a readable message."""
    field: str
    rule: str
    message: str


@runtime_checkable
class Validator(Protocol):
    """Anything that can check a populated record.

    Implementations return zero or more failures; record-level problems that
    cannot be tied to a field may be raised as RecordValidationError.
    """

    def validate(self, record: Any) -> Iterable[ValidationFailure]: ...
