from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Field and type descriptors: per-record-type mapping metadata.

A TypeDescriptor is built once per record type (see mapping.registry) and is
never mutated afterwards. Per-row state lives in the row mapper, not here.
"""

__all__ = [
    "FieldKind",
    "FieldDescriptor",
    "TypeDescriptor",
]


class FieldKind(Enum):
    """Semantic kind a cell text is converted into."""
    TEXT = "text"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"
    DATETIME = "datetime"
    DATE = "date"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class FieldDescriptor:
    """Mapping metadata for one record field.

    ``column`` is stored 0-based; the hint given by users is 1-based.
    Resolution precedence is column > letter > headers (see mapping.columns).
    """
    name: str
    kind: FieldKind
    headers: tuple[str, ...] = ()
    column: int | None = None
    letter: str = ""
    required: bool = False
    nullable: bool = False
    time_format: str = ""
    rules: dict[str, Any] | None = field(default=None, compare=False, hash=False)
    has_default: bool = False  # the dataclass field declares its own default

    @property
    def display_name(self) -> str:
        return self.headers[0] if self.headers else self.name


@dataclass(frozen=True)
class TypeDescriptor:
    """Ordered field descriptors of a record type plus lookup indices."""
    record_type: type
    fields: tuple[FieldDescriptor, ...]
    by_name: dict[str, FieldDescriptor] = field(compare=False, hash=False)
    by_header: dict[str, FieldDescriptor] = field(compare=False, hash=False)

    @classmethod
    def build(cls, record_type: type, fields: list[FieldDescriptor]) -> TypeDescriptor:
        by_name: dict[str, FieldDescriptor] = {}
        by_header: dict[str, FieldDescriptor] = {}
        for fd in fields:
            by_name[fd.name] = fd
            for alias in fd.headers:
                # first declared field wins for a shared alias
                by_header.setdefault(alias.strip().lower(), fd)
        return cls(
            record_type=record_type,
            fields=tuple(fields),
            by_name=by_name,
            by_header=by_header,
        )

    def find(self, name: str) -> FieldDescriptor | None:
        return self.by_name.get(name)

    def __len__(self) -> int:
        return len(self.fields)
