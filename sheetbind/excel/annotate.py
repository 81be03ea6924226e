from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import IO

from ..errors import ConfigurationError
from ..mapping.columns import column_letter
from ..models.options import ReadOptions
from ..models.row_error import RowError
from .document import Document, OpenpyxlDocument
from .reader import resolve_sheet

"""Error write-back into the source workbook.

Each row error is appended to the configured error column of its physical
row, on a new line below whatever text the cell already holds.
"""

__all__ = [
    "annotate_document",
    "write_errors",
    "write_errors_to",
]

logger = logging.getLogger(__name__)


def _error_column(options: ReadOptions) -> int:
    if options.error_column <= 0:
        raise ConfigurationError("error_column must be > 0 to write errors")
    return options.error_column


def annotate_document(
    document: Document,
    errors: Sequence[RowError],
    options: ReadOptions,
    sink: IO[bytes] | None = None,
) -> int:
    """Write errors into ``document`` and persist it.

    Saves to the document's own location, or to ``sink`` when given.
    Returns the number of cells written.
    """
    letter = column_letter(_error_column(options) - 1)
    sheet = resolve_sheet(document, options)
    written = 0
    for row_error in errors:
        if row_error.physical_row <= 0:
            continue
        address = f"{letter}{row_error.physical_row}"
        old = document.get_cell(sheet, address)
        message = f"{old}\n{row_error.message}" if old else row_error.message
        document.set_cell(sheet, address, message)
        written += 1
    document.save(sink)
    logger.info("annotated %d cell(s) in column %s of sheet %r", written, letter, sheet)
    return written


def write_errors(path: str | Path, errors: Sequence[RowError], options: ReadOptions) -> None:
    """Annotate the workbook at ``path`` in place. No-op for an empty list."""
    if not errors:
        return
    _error_column(options)
    with OpenpyxlDocument.open(path, read_only=False) as doc:
        annotate_document(doc, errors, options)


def write_errors_to(
    sink: IO[bytes],
    source: IO[bytes],
    errors: Sequence[RowError],
    options: ReadOptions,
) -> None:
    """Write an annotated copy of ``source`` to ``sink``; ``source`` is untouched.

    With no errors the source bytes are copied through unchanged.
    """
    if not errors:
        shutil.copyfileobj(source, sink)
        return
    _error_column(options)
    with OpenpyxlDocument.open(source, read_only=False) as doc:
        annotate_document(doc, errors, options, sink)
