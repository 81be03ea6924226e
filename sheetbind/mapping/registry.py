from __future__ import annotations

import dataclasses
import logging
import threading
import types
import typing
from datetime import date, datetime
from typing import Any

from ..models.descriptors import FieldDescriptor, FieldKind, TypeDescriptor

"""Mapping hints and the per-type descriptor registry.

Record types are dataclasses whose fields carry hints through ``excel_field``::

    @dataclass
    class Product:
        code: str = excel_field("Code", required=True)
        name: str = excel_field(col=2)
        price: float = excel_field(letter="C", rules={"exclusiveMinimum": 0})
        since: datetime | None = excel_field("Since", fmt="%Y-%m-%d")

Fields without a header, column or letter hint are not mapped.
"""

__all__ = [
    "HINTS_KEY",
    "excel_field",
    "TypeRegistry",
    "default_registry",
    "descriptor_for",
]

logger = logging.getLogger(__name__)

HINTS_KEY = "sheetbind"

_KIND_BY_TYPE: dict[Any, FieldKind] = {
    str: FieldKind.TEXT,
    int: FieldKind.INT,
    float: FieldKind.FLOAT,
    bool: FieldKind.BOOL,
    datetime: FieldKind.DATETIME,
    date: FieldKind.DATE,
}


def _split_headers(headers: str | typing.Iterable[str] | None) -> tuple[str, ...]:
    if headers is None:
        return ()
    parts = headers.split(",") if isinstance(headers, str) else list(headers)
    return tuple(p.strip() for p in parts if p and p.strip())


def excel_field(
    headers: str | typing.Iterable[str] | None = None,
    *,
    col: int | None = None,
    letter: str | None = None,
    required: bool = False,
    fmt: str | None = None,
    kind: FieldKind | None = None,
    rules: dict[str, Any] | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a mapped dataclass field.

    Parameters
    ----------
    headers: header aliases, as a list or a comma separated string
    col: explicit 1-based column number
    letter: explicit column letter ("C", "AA")
    required: a blank or missing cell is a row error
    fmt: strptime pattern tried first for date/time fields
    kind: override the kind inferred from the annotation (e.g. FieldKind.UINT)
    rules: JSON-Schema fragment consumed by JsonSchemaValidator
    """
    hints = {
        "headers": _split_headers(headers),
        "col": col,
        "letter": letter,
        "required": required,
        "fmt": fmt,
        "kind": kind,
        "rules": rules,
        "has_default": not (default is dataclasses.MISSING and default_factory is dataclasses.MISSING),
    }
    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        # mapped fields are filled after construction; keep them optional in __init__
        default = None
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={HINTS_KEY: hints},
    )


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(typing.get_args(annotation)) == 2:
            return args[0], True
    return annotation, False


def infer_kind(annotation: Any) -> tuple[FieldKind, bool]:
    """Return (kind, nullable) for a field annotation."""
    inner, nullable = _unwrap_optional(annotation)
    return _KIND_BY_TYPE.get(inner, FieldKind.UNSUPPORTED), nullable


def build_type_descriptor(record_type: type) -> TypeDescriptor:
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise TypeError(f"sheetbind: {record_type!r} is not a dataclass type")
    hints = typing.get_type_hints(record_type)
    fields: list[FieldDescriptor] = []
    for f in dataclasses.fields(record_type):
        meta = f.metadata.get(HINTS_KEY)
        if not meta:
            continue
        if not (meta["headers"] or meta["col"] or meta["letter"]):
            continue
        kind, nullable = infer_kind(hints.get(f.name, f.type))
        if meta["kind"] is not None:
            kind = meta["kind"]
        col = meta["col"]
        column = col - 1 if isinstance(col, int) and col > 0 else None
        fields.append(FieldDescriptor(
            name=f.name,
            kind=kind,
            headers=meta["headers"],
            column=column,
            letter=(meta["letter"] or "").strip().upper(),
            required=bool(meta["required"]),
            nullable=nullable,
            time_format=meta["fmt"] or "",
            rules=meta["rules"],
            has_default=meta.get("has_default", False),
        ))
    td = TypeDescriptor.build(record_type, fields)
    logger.debug("built descriptor for %s (%d mapped fields)", record_type.__name__, len(td))
    return td


class TypeRegistry:
    """Lazy, build-once-per-type cache of TypeDescriptor.

    Safe for concurrent first use: construction happens under a lock and the
    first stored descriptor wins.
    """

    def __init__(self) -> None:
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._lock = threading.Lock()

    def get(self, record_type: type) -> TypeDescriptor:
        td = self._descriptors.get(record_type)
        if td is not None:
            return td
        with self._lock:
            td = self._descriptors.get(record_type)
            if td is None:
                td = build_type_descriptor(record_type)
                self._descriptors[record_type] = td
        return td

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


default_registry = TypeRegistry()


def descriptor_for(record_type: type, registry: TypeRegistry | None = None) -> TypeDescriptor:
    if registry is None:
        registry = default_registry
    return registry.get(record_type)
