from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models.descriptors import FieldDescriptor, TypeDescriptor

"""Column resolution: which zero-based column feeds which field.

Precedence per field: explicit column number > column letter > first header
alias found in the header row. Unresolved fields are left out of the mapping.
"""

__all__ = [
    "ColumnMapping",
    "column_letter",
    "column_index_from_letter",
    "build_header_index",
    "resolve_columns",
]


def column_letter(index: int) -> str:
    """Convert a 0-based column index to its letter ("A", ..., "Z", "AA", ...)."""
    n = index + 1
    if n <= 0:
        return ""
    letters: list[str] = []
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters.append(chr(ord("A") + rem))
    return "".join(reversed(letters))


def column_index_from_letter(letter: str) -> int:
    """Convert a column letter to a 0-based index. Returns -1 when invalid."""
    s = letter.strip().upper()
    if not s:
        return -1
    n = 0
    for ch in s:
        if not ("A" <= ch <= "Z"):
            return -1
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


def build_header_index(header_cells: Sequence[str]) -> dict[str, int]:
    """Map lowercased, trimmed header text to its column; first occurrence wins."""
    index: dict[str, int] = {}
    for i, text in enumerate(header_cells):
        key = text.strip().lower()
        if key and key not in index:
            index[key] = i
    return index


@dataclass(frozen=True)
class ColumnMapping:
    """Resolved field -> column table for one read operation."""
    columns: dict[str, int] = field(default_factory=dict)  # field name -> 0-based column
    header_names: dict[int, str] = field(default_factory=dict)  # column -> header text

    def column_for(self, fd: FieldDescriptor) -> int | None:
        return self.columns.get(fd.name)

    def header_name(self, column: int) -> str:
        return self.header_names.get(column, "")

    def __len__(self) -> int:
        return len(self.columns)


def resolve_columns(
    descriptor: TypeDescriptor,
    header_index: dict[str, int] | None = None,
    header_cells: Sequence[str] | None = None,
) -> ColumnMapping:
    header_index = header_index or {}
    columns: dict[str, int] = {}
    for fd in descriptor.fields:
        if fd.column is not None and fd.column >= 0:
            columns[fd.name] = fd.column
            continue
        if fd.letter:
            idx = column_index_from_letter(fd.letter)
            if idx >= 0:
                columns[fd.name] = idx
                continue
        for alias in fd.headers:
            idx = header_index.get(alias.strip().lower())
            if idx is not None:
                columns[fd.name] = idx
                break
    header_names = {i: c.strip() for i, c in enumerate(header_cells or ()) if c.strip()}
    return ColumnMapping(columns=columns, header_names=header_names)
