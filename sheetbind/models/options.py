from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..mapping.registry import TypeRegistry
    from ..validation.base import Validator
    from .read_result import RowContext
    from .row_error import RowError

"""Read/stream/annotate options.

Row numbers are 1-based. ``header_row=0`` means the sheet has no header row,
in which case only explicit column numbers and letters can map fields.
"""

__all__ = [
    "ReadOptions",
    "RowHandler",
    "RowIndexMapper",
]

# (physical row, sequential data row count) -> logical row number
RowIndexMapper = Callable[[int, int], int]

# Raise from the handler to stop the stream.
RowHandler = Callable[["RowContext", Any, "list[RowError]"], None]


@dataclass(frozen=True)
class ReadOptions:
    """Configuration shared by every entry point.

    Attributes:
        sheet_name: Sheet to use; wins over sheet_index when set
        sheet_index: 0-based sheet index used when sheet_name is empty
        header_row: Header row number, 0 for none
        first_data_row: First data row; defaults to header_row + 1 (or 2 without header)
        validator: Optional validator run against each populated record
        error_column: 1-based column receiving error annotations (0 disables)
        row_index_mapper: Optional logical row number remapping
        stream_handler: Per-row callback, required by the streaming entry points
        registry: Descriptor registry; the process-wide default when None
    """
    sheet_name: str = ""
    sheet_index: int = 0
    header_row: int = 1
    first_data_row: int | None = None
    validator: Validator | None = None
    error_column: int = 0
    row_index_mapper: RowIndexMapper | None = None
    stream_handler: RowHandler | None = None
    registry: TypeRegistry | None = None

    @property
    def data_start(self) -> int:
        if self.first_data_row is not None and self.first_data_row > 0:
            return self.first_data_row
        if self.header_row > 0:
            return self.header_row + 1
        return 2

    def with_(self, **changes: Any) -> ReadOptions:
        return replace(self, **changes)
