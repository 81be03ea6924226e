from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .row_error import RowError

__all__ = [
    "ReadResult",
    "RowContext",
]


@dataclass(frozen=True)
class RowContext:
    """Position of the row handed to a stream handler."""
    physical_row: int
    logical_row: int | None  # None when the row could not be read


@dataclass
class ReadResult:
    """Batch read output: valid records and row errors, in sheet order.

    A row contributes either a record or errors, never both.
    """
    records: list[Any] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __iter__(self):
        # allows `records, errors = read_file(...)`
        yield self.records
        yield self.errors
