"""sheetbind: map spreadsheet rows to typed records and back.

Typical use::

    @dataclass
    class Product:
        code: str = excel_field("Code", required=True)
        price: float = excel_field(letter="C")

    records, errors = read_file("products.xlsx", Product, ReadOptions(sheet_name="Products"))
"""

from .errors import (
    ConfigurationError,
    ConversionError,
    FieldValidationError,
    RecordValidationError,
    RequiredValueError,
    RowReadError,
    SetupError,
    SheetBindError,
    SheetHeaderError,
    SheetNotFoundError,
    StreamAborted,
)
from .excel.annotate import annotate_document, write_errors, write_errors_to
from .excel.document import Document, OpenpyxlDocument, RowRead
from .excel.reader import read, read_document, read_file, stream, stream_document, stream_file
from .excel.writer import write_records
from .mapping.registry import TypeRegistry, default_registry, excel_field
from .models import FieldKind, ReadOptions, ReadResult, RowContext, RowError
from .validation import JsonSchemaValidator, ValidationFailure, Validator

__version__ = "0.1.0"

__all__ = [
    # Declaring records
    "excel_field",
    "FieldKind",
    "TypeRegistry",
    "default_registry",
    # Reading
    "ReadOptions",
    "ReadResult",
    "RowContext",
    "RowError",
    "read",
    "read_file",
    "read_document",
    "stream",
    "stream_file",
    "stream_document",
    # Writing
    "annotate_document",
    "write_errors",
    "write_errors_to",
    "write_records",
    # Collaborators
    "Document",
    "OpenpyxlDocument",
    "RowRead",
    "JsonSchemaValidator",
    "ValidationFailure",
    "Validator",
    # Errors
    "SheetBindError",
    "SetupError",
    "SheetNotFoundError",
    "SheetHeaderError",
    "ConfigurationError",
    "ConversionError",
    "RequiredValueError",
    "RowReadError",
    "RecordValidationError",
    "FieldValidationError",
    "StreamAborted",
]
