from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

"""RowError model: one addressable problem found while mapping a sheet.

Every row error keeps its full position (physical row, logical row, column
number and letter, field, display name, raw value) so tooling can point the
operator to the exact cell without re-deriving anything.
"""

__all__ = [
    "RowError",
]


@dataclass(frozen=True)
class RowError:
    """Structured, immutable description of a row/column/field problem.

    Attributes:
        physical_row: 1-based row in the sheet as stored (header and blank rows count)
        logical_row: 1-based data row index (or caller remapped). None for row-read failures
        column: 1-based column number. None when the column is unknown
        column_letter: Column letter, e.g. "C". Empty when the column is unknown
        field: Record field name. Empty for row-level errors
        column_name: Header text or configured display name
        value: Raw cell text
        error: Underlying exception
    """
    physical_row: int
    logical_row: int | None
    column: int | None
    column_letter: str
    field: str
    column_name: str
    value: str
    error: BaseException

    @property
    def message(self) -> str:
        return str(self.error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "physical_row": self.physical_row,
            "logical_row": self.logical_row,
            "column": self.column,
            "column_letter": self.column_letter,
            "field": self.field,
            "column_name": self.column_name,
            "value": self.value,
            "error_type": type(self.error).__name__,
            "message": self.message,
        }

    def to_json_line(self) -> str:
        """Serialize to a single JSON Lines entry with a fixed key set."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        where = f"row {self.physical_row}"
        if self.column_letter:
            where += f" col {self.column_letter}"
        if self.field:
            where += f" field {self.field}"
        return f"{where}: {self.message}"
