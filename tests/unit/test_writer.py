from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import openpyxl

from sheetbind.excel.reader import read
from sheetbind.excel.writer import export_layout, write_records
from sheetbind.mapping.registry import TypeRegistry, excel_field


@dataclass
class Part:
    code: str = excel_field("Code", required=True)
    price: float = excel_field(letter="D")
    qty: int = excel_field("Qty")
    active: bool = excel_field(col=2)
    note: str = ""


def test_export_layout_honors_explicit_columns():
    layout = export_layout(TypeRegistry().get(Part))
    assert layout == {"price": 3, "active": 1, "code": 0, "qty": 2}


def test_write_records_header_and_rows():
    sink = BytesIO()
    n = write_records(sink, [Part("P1", 2.5, 3, True)], Part, sheet_name="Parts")
    assert n == 1
    ws = openpyxl.load_workbook(BytesIO(sink.getvalue()))["Parts"]
    assert [c.value for c in ws[1]] == ["Code", "active", "Qty", "price"]
    assert [c.value for c in ws[2]] == ["P1", True, 3, 2.5]


def test_written_records_read_back():
    parts = [Part("P1", 2.5, 3, True), Part("P2", 10.0, 0, False)]
    sink = BytesIO()
    write_records(sink, parts, Part)
    sink.seek(0)
    records, errors = read(sink, Part)
    assert errors == []
    assert records == parts
