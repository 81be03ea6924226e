from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import IO, Any, NamedTuple, Protocol

import openpyxl
from openpyxl.styles import Alignment
from openpyxl.workbook.workbook import Workbook

from ..errors import ConfigurationError, RowReadError, SheetNotFoundError

"""Tabular document collaborator backed by openpyxl.

Reading uses openpyxl's read-only mode so rows are pulled one at a time from
the archive. Annotation opens the workbook in normal mode (formulas kept) so
cells can be written and the workbook saved.
"""

__all__ = [
    "RowRead",
    "Document",
    "OpenpyxlDocument",
    "cell_text",
    "row_text",
]


class RowRead(NamedTuple):
    """One row pulled from a sheet: cell texts, or the error that prevented reading it."""
    cells: list[str] | None
    error: BaseException | None = None


class Document(Protocol):
    def sheet_names(self) -> list[str]: ...

    def iter_rows(self, sheet: str) -> Iterator[RowRead]: ...

    def get_cell(self, sheet: str, address: str) -> str: ...

    def set_cell(self, sheet: str, address: str, text: str) -> None: ...

    def save(self, sink: IO[bytes] | None = None) -> None: ...

    def close(self) -> None: ...


def cell_text(value: Any) -> str:
    """Render a cell value the way it reads in a spreadsheet."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    return str(value)


def row_text(values: Sequence[Any]) -> list[str]:
    """Cell texts of one row with trailing blank cells dropped."""
    cells = [cell_text(v) for v in values]
    while cells and not cells[-1].strip():
        cells.pop()
    return cells


class OpenpyxlDocument:
    """Document implementation over an openpyxl Workbook."""

    def __init__(self, workbook: Workbook, path: Path | None = None) -> None:
        self.workbook = workbook
        self.path = path

    @classmethod
    def open(cls, source: str | Path | IO[bytes], *, read_only: bool = True) -> OpenpyxlDocument:
        """Open a workbook from a path or a binary stream.

        read_only=True streams rows and reads cached formula values;
        read_only=False loads the whole workbook for writing.
        """
        path = Path(source) if isinstance(source, (str, Path)) else None
        wb = openpyxl.load_workbook(
            path if path is not None else source,
            read_only=read_only,
            data_only=read_only,
        )
        return cls(wb, path)

    def __enter__(self) -> OpenpyxlDocument:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _sheet(self, sheet: str) -> Any:
        if sheet not in self.workbook.sheetnames:
            raise SheetNotFoundError(f"sheet {sheet!r} not found")
        return self.workbook[sheet]

    def sheet_names(self) -> list[str]:
        return list(self.workbook.sheetnames)

    def iter_rows(self, sheet: str) -> Iterator[RowRead]:
        """Yield the rows of ``sheet`` as text.

        A row the parser cannot decode is yielded once as a RowRead carrying
        RowReadError. Iteration ends there: openpyxl's row parser cannot
        resume after a failure.
        """
        rows = self._sheet(sheet).iter_rows(values_only=True)
        while True:
            try:
                values = next(rows)
            except StopIteration:
                return
            except Exception as e:
                yield RowRead(None, RowReadError(f"read row: {e}"))
                return
            yield RowRead(row_text(values))

    def get_cell(self, sheet: str, address: str) -> str:
        return cell_text(self._sheet(sheet)[address].value)

    def set_cell(self, sheet: str, address: str, text: str) -> None:
        cell = self._sheet(sheet)[address]
        cell.value = text
        if "\n" in text:
            cell.alignment = Alignment(wrap_text=True)

    def save(self, sink: IO[bytes] | None = None) -> None:
        if sink is not None:
            self.workbook.save(sink)
            return
        if self.path is None:
            raise ConfigurationError("document was opened from a stream; a sink is required to save it")
        self.workbook.save(self.path)

    def close(self) -> None:
        self.workbook.close()
