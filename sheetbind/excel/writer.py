from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import IO, Any

from openpyxl import Workbook

from ..mapping.columns import column_index_from_letter
from ..mapping.registry import TypeRegistry, descriptor_for
from ..models.descriptors import TypeDescriptor

"""Record export: typed records back into a new workbook.

Row 1 holds each field's display name (first header alias, else the field
name). Explicit column numbers and letters are honored; the remaining mapped
fields fill the free columns left to right in declaration order.
"""

__all__ = [
    "export_layout",
    "write_records",
]

logger = logging.getLogger(__name__)


def export_layout(descriptor: TypeDescriptor) -> dict[str, int]:
    """Field name -> 0-based column used when exporting."""
    layout: dict[str, int] = {}
    for fd in descriptor.fields:
        if fd.column is not None and fd.column >= 0:
            layout[fd.name] = fd.column
        elif fd.letter and column_index_from_letter(fd.letter) >= 0:
            layout[fd.name] = column_index_from_letter(fd.letter)
    taken = set(layout.values())
    nxt = 0
    for fd in descriptor.fields:
        if fd.name in layout:
            continue
        while nxt in taken:
            nxt += 1
        layout[fd.name] = nxt
        taken.add(nxt)
    return layout


def write_records(
    sink: str | Path | IO[bytes],
    records: Iterable[Any],
    record_type: type,
    sheet_name: str = "Sheet1",
    registry: TypeRegistry | None = None,
) -> int:
    """Write ``records`` to ``sink`` as a single-sheet workbook. Returns the row count."""
    descriptor = descriptor_for(record_type, registry)
    layout = export_layout(descriptor)
    width = max(layout.values(), default=-1) + 1

    wb = Workbook(write_only=True)
    ws = wb.create_sheet(title=sheet_name)
    header: list[Any] = [None] * width
    for fd in descriptor.fields:
        header[layout[fd.name]] = fd.display_name
    ws.append(header)

    count = 0
    for record in records:
        row: list[Any] = [None] * width
        for fd in descriptor.fields:
            row[layout[fd.name]] = getattr(record, fd.name)
        ws.append(row)
        count += 1
    wb.save(sink)
    logger.info("exported %d record(s) to sheet %r", count, sheet_name)
    return count
