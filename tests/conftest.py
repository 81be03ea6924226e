# Shared pytest fixtures
from __future__ import annotations

import tempfile
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

import pandas as pd
import pytest

from sheetbind.errors import SheetNotFoundError
from sheetbind.excel.document import RowRead


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


def make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Create a real .xlsx file; each list entry is one sheet row starting at row 1."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows, dtype=object)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def excel_factory(temp_workdir: Path):
    def _make(name: str, sheets: dict[str, list[list[object]]]) -> Path:
        return make_excel(temp_workdir / "data" / name, sheets)
    return _make


@pytest.fixture()
def corrupt_xlsx(tmp_path: Path) -> Path:
    """Workbook whose third row holds a numeric cell the parser cannot decode."""
    from openpyxl import Workbook

    good = tmp_path / "good.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Items"
    for row in (["Code", "Qty"], ["A", 1], ["B", 222222], ["C", 3]):
        ws.append(row)
    wb.save(good)

    bad = tmp_path / "corrupt.xlsx"
    with zipfile.ZipFile(good) as src, zipfile.ZipFile(bad, "w", zipfile.ZIP_DEFLATED) as dst:
        for item in src.infolist():
            data = src.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = data.replace(b"<v>222222</v>", b"<v>22x22</v>")
            dst.writestr(item, data)
    return bad


class FakeDocument:
    """In-memory Document: rows are lists of cell texts or exceptions."""

    def __init__(self, sheets: dict[str, list[Any]]) -> None:
        self.sheets = sheets
        self.cells: dict[tuple[str, str], str] = {}
        self.saved_to: list[Any] = []
        self.rows_pulled = 0

    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def iter_rows(self, sheet: str) -> Iterator[RowRead]:
        if sheet not in self.sheets:
            raise SheetNotFoundError(sheet)
        for row in self.sheets[sheet]:
            self.rows_pulled += 1
            if isinstance(row, BaseException):
                yield RowRead(None, row)
            else:
                yield RowRead(list(row))

    def get_cell(self, sheet: str, address: str) -> str:
        return self.cells.get((sheet, address), "")

    def set_cell(self, sheet: str, address: str, text: str) -> None:
        self.cells[(sheet, address)] = text

    def save(self, sink: IO[bytes] | None = None) -> None:
        self.saved_to.append(sink)

    def close(self) -> None:
        pass


@pytest.fixture()
def fake_document():
    return FakeDocument
