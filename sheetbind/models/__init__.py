"""Domain models shared by the mapping engine, readers and annotator."""

from .descriptors import FieldDescriptor, FieldKind, TypeDescriptor
from .options import ReadOptions, RowHandler, RowIndexMapper
from .read_result import ReadResult, RowContext
from .row_error import RowError

__all__ = [
    # Metadata
    "FieldDescriptor",
    "FieldKind",
    "TypeDescriptor",
    # Options
    "ReadOptions",
    "RowHandler",
    "RowIndexMapper",
    # Results
    "ReadResult",
    "RowContext",
    "RowError",
]
