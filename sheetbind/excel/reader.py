from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any

from ..errors import ConfigurationError, RowReadError, SheetHeaderError, SheetNotFoundError, StreamAborted
from ..mapping.columns import ColumnMapping, build_header_index, resolve_columns
from ..mapping.registry import descriptor_for
from ..mapping.row_mapper import map_row
from ..models.descriptors import TypeDescriptor
from ..models.options import ReadOptions
from ..models.read_result import ReadResult, RowContext
from ..models.row_error import RowError
from .document import Document, OpenpyxlDocument

"""Batch and streaming readers.

Row selection is shared by both modes:
- rows before ``first_data_row`` are skipped
- rows whose cells are all blank are skipped and do not consume a logical index
- the logical index is the running count of data rows, or
  ``row_index_mapper(physical_row, count)`` when configured

Sheet and header problems raise before any data row is mapped. Row problems
are collected as RowError and never stop the batch reader.
"""

__all__ = [
    "resolve_sheet",
    "parse_header",
    "read_document",
    "read_file",
    "read",
    "stream_document",
    "stream_file",
    "stream",
]

logger = logging.getLogger(__name__)


def resolve_sheet(document: Document, options: ReadOptions) -> str:
    """Pick the sheet name: ``sheet_name`` wins over ``sheet_index``."""
    names = document.sheet_names()
    if options.sheet_name:
        if options.sheet_name not in names:
            raise SheetNotFoundError(f"sheet {options.sheet_name!r} not found")
        return options.sheet_name
    if not names:
        raise SheetNotFoundError("workbook has no sheets")
    if options.sheet_index < 0 or options.sheet_index >= len(names):
        raise SheetNotFoundError(f"sheet index {options.sheet_index} out of range")
    return names[options.sheet_index]


def parse_header(document: Document, sheet: str, header_row: int) -> list[str]:
    """Return the trimmed cell texts of ``header_row``."""
    for physical, row in enumerate(document.iter_rows(sheet), start=1):
        if physical < header_row:
            continue
        if row.cells is None:
            raise SheetHeaderError(f"header row {header_row} could not be read: {row.error}")
        return [c.strip() for c in row.cells]
    raise SheetHeaderError(f"header row {header_row} not found")


def is_blank_row(cells: list[str]) -> bool:
    return all(not c.strip() for c in cells)


@dataclass(frozen=True)
class _Plan:
    sheet: str
    descriptor: TypeDescriptor
    mapping: ColumnMapping


def _prepare(document: Document, record_type: type, options: ReadOptions) -> _Plan:
    sheet = resolve_sheet(document, options)
    descriptor = descriptor_for(record_type, options.registry)
    header_cells: list[str] = []
    if options.header_row > 0:
        header_cells = parse_header(document, sheet, options.header_row)
    mapping = resolve_columns(descriptor, build_header_index(header_cells), header_cells)
    unresolved = [fd.name for fd in descriptor.fields if mapping.column_for(fd) is None]
    if unresolved:
        logger.debug("sheet %r: unmapped fields %s", sheet, unresolved)
    logger.debug("sheet %r: %d/%d fields mapped", sheet, len(mapping), len(descriptor))
    return _Plan(sheet=sheet, descriptor=descriptor, mapping=mapping)


def _read_error(physical_row: int, error: BaseException) -> RowError:
    return RowError(
        physical_row=physical_row,
        logical_row=None,
        column=None,
        column_letter="",
        field="",
        column_name="",
        value="",
        error=error,
    )


@dataclass(frozen=True)
class _Row:
    physical_row: int
    logical_row: int | None
    record: Any | None
    errors: list[RowError]


def _iter_rows(document: Document, plan: _Plan, options: ReadOptions) -> Iterator[_Row]:
    start = options.data_start
    count = 0
    for physical, row in enumerate(document.iter_rows(plan.sheet), start=1):
        if row.cells is None:
            error = row.error or RowReadError("read row: unreadable row")
            yield _Row(physical, None, None, [_read_error(physical, error)])
            continue
        if physical < start or is_blank_row(row.cells):
            continue
        count += 1
        logical = count
        if options.row_index_mapper is not None:
            logical = options.row_index_mapper(physical, count)
        mapped = map_row(row.cells, plan.mapping, plan.descriptor, options.validator, physical, logical)
        yield _Row(physical, logical, mapped.record, mapped.errors)


def read_document(document: Document, record_type: type, options: ReadOptions | None = None) -> ReadResult:
    """Map every data row of the selected sheet."""
    options = options or ReadOptions()
    plan = _prepare(document, record_type, options)
    result = ReadResult()
    for row in _iter_rows(document, plan, options):
        result.errors.extend(row.errors)
        if row.record is not None:
            result.records.append(row.record)
    logger.info(
        "read sheet %r: %d record(s), %d error(s)", plan.sheet, len(result.records), len(result.errors)
    )
    return result


def read_file(path: str | Path, record_type: type, options: ReadOptions | None = None) -> ReadResult:
    with OpenpyxlDocument.open(path) as doc:
        return read_document(doc, record_type, options)


def read(source: IO[bytes], record_type: type, options: ReadOptions | None = None) -> ReadResult:
    """Like read_file, for an uploaded or in-memory workbook."""
    with OpenpyxlDocument.open(source) as doc:
        return read_document(doc, record_type, options)


def stream_document(document: Document, record_type: type, options: ReadOptions) -> list[RowError]:
    """Hand every data row to ``options.stream_handler``.

    The handler receives (RowContext, record or None, row errors). Raising
    from the handler stops the stream: StreamAborted is raised with the
    handler's exception as cause and the errors collected so far.
    """
    handler = options.stream_handler
    if handler is None:
        raise ConfigurationError("a stream handler is required for streaming reads")
    plan = _prepare(document, record_type, options)
    errors: list[RowError] = []
    rows = 0
    for row in _iter_rows(document, plan, options):
        rows += 1
        errors.extend(row.errors)
        try:
            handler(RowContext(row.physical_row, row.logical_row), row.record, list(row.errors))
        except Exception as e:
            logger.info("stream on sheet %r stopped at row %d: %s", plan.sheet, row.physical_row, e)
            raise StreamAborted(e, errors) from e
    logger.info("streamed sheet %r: %d row(s), %d error(s)", plan.sheet, rows, len(errors))
    return errors


def stream_file(path: str | Path, record_type: type, options: ReadOptions) -> list[RowError]:
    """Stream a workbook file; annotate it in place when ``error_column`` is set."""
    from .annotate import write_errors

    if options.stream_handler is None:
        raise ConfigurationError("a stream handler is required for streaming reads")
    with OpenpyxlDocument.open(path) as doc:
        errors = stream_document(doc, record_type, options)
    if options.error_column > 0 and errors:
        write_errors(path, errors, options)
    return errors


def stream(source: IO[bytes], record_type: type, options: ReadOptions) -> list[RowError]:
    """Stream from a binary stream. The source is never modified."""
    if options.stream_handler is None:
        raise ConfigurationError("a stream handler is required for streaming reads")
    with OpenpyxlDocument.open(source) as doc:
        return stream_document(doc, record_type, options)
