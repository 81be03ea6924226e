from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..errors import ConversionError, FieldValidationError, RecordValidationError, RequiredValueError
from ..models.descriptors import FieldDescriptor, TypeDescriptor
from ..models.row_error import RowError
from ..validation.base import ValidationFailure, Validator
from .columns import ColumnMapping, column_letter
from .convert import convert_field, zero_value

"""Row mapping: one row of cell texts -> record or row errors.

A row is valid only when it produced no error at all, from conversion or
from the validator. Invalid rows never return a record.
"""

__all__ = [
    "MappedRow",
    "build_row_error",
    "build_record",
    "map_row",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappedRow:
    record: Any | None
    errors: list[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None and not self.errors


def build_row_error(
    physical_row: int,
    logical_row: int | None,
    fd: FieldDescriptor | None,
    col: int | None,
    mapping: ColumnMapping,
    cells: Sequence[str],
    error: BaseException,
    display: str = "",
) -> RowError:
    raw = ""
    letter = ""
    column: int | None = None
    name = ""
    if col is not None and col >= 0:
        column = col + 1
        letter = column_letter(col)
        name = mapping.header_name(col)
        if col < len(cells):
            raw = cells[col]
    if not name and fd is not None and fd.headers:
        name = fd.headers[0]
    if not name:
        name = display or (fd.name if fd is not None else "")
    return RowError(
        physical_row=physical_row,
        logical_row=logical_row,
        column=column,
        column_letter=letter,
        field=fd.name if fd is not None else display,
        column_name=name,
        value=raw,
        error=error,
    )


def build_record(descriptor: TypeDescriptor, values: dict[str, Any]) -> Any:
    """Instantiate the record type from converted values.

    Mapped fields without a value get their declared default, or the zero
    value of their kind.
    """
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(descriptor.record_type):
        if not f.init:
            continue
        if f.name in values:
            kwargs[f.name] = values[f.name]
            continue
        fd = descriptor.find(f.name)
        if fd is not None and not fd.has_default:
            kwargs[f.name] = zero_value(fd)
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            kwargs[f.name] = None
    return descriptor.record_type(**kwargs)


def _run_validator(validator: Validator, record: Any) -> list[ValidationFailure]:
    try:
        return list(validator.validate(record))
    except RecordValidationError:
        raise
    except Exception as e:
        raise RecordValidationError(f"struct validation error: {e}") from e


def map_row(
    cells: Sequence[str],
    mapping: ColumnMapping,
    descriptor: TypeDescriptor,
    validator: Validator | None = None,
    physical_row: int = 0,
    logical_row: int | None = None,
) -> MappedRow:
    errors: list[RowError] = []
    values: dict[str, Any] = {}

    for fd in descriptor.fields:
        col = mapping.column_for(fd)
        if col is None:
            continue

        if col < 0 or col >= len(cells):
            if fd.required:
                errors.append(build_row_error(
                    physical_row, logical_row, fd, col, mapping, cells,
                    RequiredValueError("required column out of range"),
                ))
            continue

        raw = cells[col]
        if not raw.strip():
            if fd.required:
                errors.append(build_row_error(
                    physical_row, logical_row, fd, col, mapping, cells,
                    RequiredValueError("required value is empty"),
                ))
            continue

        try:
            values[fd.name] = convert_field(raw, fd)
        except ConversionError as e:
            errors.append(build_row_error(physical_row, logical_row, fd, col, mapping, cells, e))

    record = build_record(descriptor, values)

    if validator is not None:
        try:
            failures = _run_validator(validator, record)
        except RecordValidationError as e:
            failures = []
            errors.append(RowError(
                physical_row=physical_row,
                logical_row=logical_row,
                column=None,
                column_letter="",
                field="",
                column_name="",
                value="",
                error=e,
            ))
        for failure in failures:
            fd = descriptor.find(failure.field)
            col = mapping.column_for(fd) if fd is not None else None
            display = fd.headers[0] if fd is not None and fd.headers else failure.field
            err = FieldValidationError(
                f"column '{display}' failed on '{failure.rule}': {failure.message}",
                field=failure.field,
                rule=failure.rule,
            )
            errors.append(build_row_error(
                physical_row, logical_row, fd, col, mapping, cells, err, display=display,
            ))

    if errors:
        logger.debug("row %d: %d error(s)", physical_row, len(errors))
        return MappedRow(record=None, errors=errors)
    return MappedRow(record=record, errors=[])
