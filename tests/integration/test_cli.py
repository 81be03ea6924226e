from __future__ import annotations

import json
from pathlib import Path

import openpyxl
import pytest

from sheetbind.cli import main
from sheetbind.cli.__main__ import EXIT_FATAL, EXIT_ROW_ERRORS, EXIT_SUCCESS
from sheetbind.logging.init import reset_logging

MAPPING = """sheet: Products
error_column: 6
record:
  name: Product
  fields:
    - {name: code, type: text, headers: [Code, SKU], required: true}
    - {name: qty, type: uint, headers: Qty}
    - {name: price, type: float, letter: C, rules: {exclusiveMinimum: 0}}
"""


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def mapping_file(temp_workdir: Path) -> Path:
    path = temp_workdir / "config" / "mapping.yml"
    path.write_text(MAPPING, encoding="utf-8")
    return path


@pytest.fixture()
def clean_xlsx(excel_factory) -> Path:
    return excel_factory("clean.xlsx", {"Products": [["SKU", "Qty", "Price"], ["A", 1, 2.5], ["B", 2, 3]]})


@pytest.fixture()
def dirty_xlsx(excel_factory) -> Path:
    return excel_factory(
        "dirty.xlsx",
        {"Products": [["Code", "Qty", "Price"], ["A", -1, 2.5], ["B", 2, 0], ["C", 3, 4]]},
    )


def test_check_clean_workbook(capsys, mapping_file: Path, clean_xlsx: Path):
    code = main(["check", str(clean_xlsx), "--config", str(mapping_file)])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS
    assert "SUMMARY rows=2 valid=2 invalid=0 errors=0" in out


def test_check_reports_row_errors(capsys, mapping_file: Path, dirty_xlsx: Path):
    code = main(["check", str(dirty_xlsx), "--config", str(mapping_file)])
    out = capsys.readouterr().out
    assert code == EXIT_ROW_ERRORS
    assert "WARN row=2 col=B field=qty" in out
    assert "WARN row=3 col=C field=price" in out
    assert "SUMMARY rows=3 valid=1 invalid=2 errors=2" in out


def test_check_stream_mode(capsys, mapping_file: Path, dirty_xlsx: Path):
    code = main(["check", str(dirty_xlsx), "--config", str(mapping_file), "--stream"])
    out = capsys.readouterr().out
    assert code == EXIT_ROW_ERRORS
    assert "SUMMARY rows=3 valid=1 invalid=2 errors=2" in out


def test_check_annotate_to(capsys, mapping_file: Path, dirty_xlsx: Path, temp_workdir: Path):
    original = dirty_xlsx.read_bytes()
    out_path = temp_workdir / "data" / "annotated.xlsx"
    code = main(["check", str(dirty_xlsx), "--config", str(mapping_file), "--annotate-to", str(out_path)])
    assert code == EXIT_ROW_ERRORS
    assert dirty_xlsx.read_bytes() == original
    ws = openpyxl.load_workbook(out_path)["Products"]
    assert "invalid unsigned integer" in ws["F2"].value
    assert "price" in ws["F3"].value
    assert ws["F4"].value is None


def test_check_annotate_in_place_with_error_column_override(mapping_file: Path, dirty_xlsx: Path):
    code = main([
        "check", str(dirty_xlsx), "--config", str(mapping_file),
        "--annotate-in-place", "--error-column", "8",
    ])
    assert code == EXIT_ROW_ERRORS
    ws = openpyxl.load_workbook(dirty_xlsx)["Products"]
    assert ws["H2"].value
    assert ws["F2"].value is None


def test_check_error_log(mapping_file: Path, dirty_xlsx: Path, temp_workdir: Path):
    main(["check", str(dirty_xlsx), "--config", str(mapping_file), "--error-log"])
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    lines = logs[0].read_text(encoding="utf-8").strip().splitlines()
    assert [json.loads(line)["physical_row"] for line in lines] == [2, 3]
    assert json.loads(lines[0])["file"] == "dirty.xlsx"


def test_missing_config_is_fatal(capsys, temp_workdir: Path, clean_xlsx: Path):
    code = main(["check", str(clean_xlsx), "--config", str(temp_workdir / "nope.yml")])
    assert code == EXIT_FATAL
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_missing_workbook_is_fatal(mapping_file: Path, temp_workdir: Path):
    assert main(["check", str(temp_workdir / "missing.xlsx"), "--config", str(mapping_file)]) == EXIT_FATAL


def test_unknown_sheet_is_fatal(capsys, mapping_file: Path, clean_xlsx: Path):
    code = main(["check", str(clean_xlsx), "--config", str(mapping_file), "--sheet", "Other"])
    assert code == EXIT_FATAL
    assert "ERROR read:" in capsys.readouterr().out


def test_inspect(capsys, mapping_file: Path, clean_xlsx: Path):
    code = main(["inspect", str(clean_xlsx), "--config", str(mapping_file)])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS
    assert "SHEETS: ['Products']" in out
    assert "code: text required -> A (1)" in out
    assert "qty: uint -> B (2)" in out
    assert "price: float -> C (3)" in out


def test_unreadable_workbook_is_fatal(capsys, mapping_file: Path, temp_workdir: Path):
    broken = temp_workdir / "data" / "broken.xlsx"
    broken.write_bytes(b"this is not a zip archive")

    assert main(["check", str(broken), "--config", str(mapping_file)]) == EXIT_FATAL
    assert "ERROR read:" in capsys.readouterr().out

    assert main(["check", str(broken), "--config", str(mapping_file), "--stream"]) == EXIT_FATAL
    assert "ERROR read:" in capsys.readouterr().out

    assert main(["inspect", str(broken), "--config", str(mapping_file)]) == EXIT_FATAL
    assert "ERROR inspect:" in capsys.readouterr().out
