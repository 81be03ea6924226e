from __future__ import annotations

import json

from sheetbind.errors import ConversionError
from sheetbind.models.row_error import RowError

EXPECTED_KEYS = {
    "physical_row",
    "logical_row",
    "column",
    "column_letter",
    "field",
    "column_name",
    "value",
    "error_type",
    "message",
}


def test_row_error_json_line_keys():
    err = RowError(5, 4, 2, "B", "qty", "Qty", "ten", ConversionError("invalid integer: 'ten'", "ten"))
    obj = json.loads(err.to_json_line())
    assert set(obj) == EXPECTED_KEYS
    assert obj["error_type"] == "ConversionError"
    assert obj["message"] == "invalid integer: 'ten'"
    assert "\n" not in err.to_json_line()


def test_row_error_str():
    err = RowError(5, 4, 2, "B", "qty", "Qty", "ten", ConversionError("invalid integer: 'ten'"))
    assert str(err) == "row 5 col B field qty: invalid integer: 'ten'"
