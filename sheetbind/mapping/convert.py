from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import Any

from ..errors import ConversionError
from ..models.descriptors import FieldDescriptor, FieldKind

"""Cell text -> typed value conversion.

Date/time parsing is layered, first match wins:
1. the field's own strptime pattern
2. RFC 3339 timestamps with an offset ("2024-01-15T10:30:00+07:00", "...Z")
3. the common layouts in DATE_LAYOUTS
4. spreadsheet serial numbers (days since 1899-12-30)
"""

__all__ = [
    "BOOL_TRUE",
    "BOOL_FALSE",
    "DATE_LAYOUTS",
    "SERIAL_EPOCH",
    "parse_bool",
    "parse_int",
    "parse_uint",
    "parse_float",
    "serial_to_datetime",
    "parse_datetime",
    "convert",
    "convert_field",
    "zero_value",
]

BOOL_TRUE = frozenset({"1", "true", "t", "yes", "y", "on"})
BOOL_FALSE = frozenset({"0", "false", "f", "no", "n", "off"})

RFC3339_LAYOUTS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)

DATE_LAYOUTS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M",
    "%Y-%m-%d %H:%M",
    "%d-%m-%Y %H:%M",
    "%Y-%m-%d %H:%M:%S",  # how datetime cells are rendered to text
)

# 1900 date system; 1899-12-30 absorbs the phantom 1900-02-29
SERIAL_EPOCH = datetime(1899, 12, 30)
SECONDS_PER_DAY = 24 * 60 * 60

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"\+?[0-9]+")


def parse_bool(raw: str) -> bool:
    s = raw.strip().lower()
    if s in BOOL_TRUE:
        return True
    if s in BOOL_FALSE:
        return False
    raise ConversionError(f"invalid bool: {raw!r}", raw)


def parse_int(raw: str) -> int:
    s = raw.strip()
    if not _INT_RE.fullmatch(s):
        raise ConversionError(f"invalid integer: {raw!r}", raw)
    value = int(s)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ConversionError(f"integer out of range: {raw!r}", raw)
    return value


def parse_uint(raw: str) -> int:
    s = raw.strip()
    if not _UINT_RE.fullmatch(s):
        raise ConversionError(f"invalid unsigned integer: {raw!r}", raw)
    value = int(s)
    if value > UINT64_MAX:
        raise ConversionError(f"unsigned integer out of range: {raw!r}", raw)
    return value


def parse_float(raw: str) -> float:
    s = raw.strip()
    # float() accepts digit separators, the cell text must not
    if "_" in s:
        raise ConversionError(f"invalid float: {raw!r}", raw)
    try:
        return float(s)
    except ValueError:
        raise ConversionError(f"invalid float: {raw!r}", raw) from None


def serial_to_datetime(serial: float) -> datetime:
    """Convert a spreadsheet serial date to a naive datetime.

    The fractional part is the time of day, rounded to the nearest second.
    """
    if not math.isfinite(serial) or serial <= 0:
        raise ConversionError(f"invalid serial date: {serial}")
    days = int(serial)
    seconds = int((serial - days) * SECONDS_PER_DAY + 0.5)
    try:
        return SERIAL_EPOCH + timedelta(days=days, seconds=seconds)
    except OverflowError:
        raise ConversionError(f"serial date out of range: {serial}") from None


def _strptime(text: str, layout: str) -> datetime | None:
    try:
        return datetime.strptime(text, layout)
    except ValueError:
        return None


def parse_datetime(raw: str, fmt: str = "") -> datetime:
    s = raw.strip()
    if not s:
        raise ConversionError("empty time", raw)

    layouts: list[str] = [fmt] if fmt else []
    layouts.extend(RFC3339_LAYOUTS)
    layouts.extend(DATE_LAYOUTS)
    for layout in layouts:
        parsed = _strptime(s, layout)
        if parsed is not None:
            return parsed

    try:
        serial = float(s)
    except ValueError:
        serial = None
    if serial is not None:
        try:
            return serial_to_datetime(serial)
        except ConversionError:
            pass

    raise ConversionError(f"cannot parse time: {raw!r}", raw)


def convert(raw: str, kind: FieldKind, fmt: str = "") -> Any:
    """Convert one cell text to ``kind``. Raises ConversionError."""
    if kind is FieldKind.TEXT:
        return raw
    if kind is FieldKind.INT:
        return parse_int(raw)
    if kind is FieldKind.UINT:
        return parse_uint(raw)
    if kind is FieldKind.FLOAT:
        return parse_float(raw)
    if kind is FieldKind.BOOL:
        return parse_bool(raw)
    if kind is FieldKind.DATETIME:
        return parse_datetime(raw, fmt)
    if kind is FieldKind.DATE:
        return parse_datetime(raw, fmt).date()
    raise ConversionError(f"unsupported kind {kind.value} for value {raw!r}", raw)


def convert_field(raw: str, fd: FieldDescriptor) -> Any:
    """Convert for a field, honoring nullable fields (blank -> None)."""
    if fd.nullable and not raw.strip():
        return None
    return convert(raw, fd.kind, fd.time_format)


_ZERO: dict[FieldKind, Any] = {
    FieldKind.TEXT: "",
    FieldKind.INT: 0,
    FieldKind.UINT: 0,
    FieldKind.FLOAT: 0.0,
    FieldKind.BOOL: False,
}


def zero_value(fd: FieldDescriptor) -> Any:
    if fd.nullable:
        return None
    return _ZERO.get(fd.kind)
