from __future__ import annotations

import dataclasses
import json
import keyword
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import ConfigurationError
from ..mapping.registry import excel_field
from ..models.descriptors import FieldKind
from ..models.options import ReadOptions
from ..validation.schema import JsonSchemaValidator

"""Mapping file loader.

A mapping file describes the sheet layout and the record shape in YAML::

    sheet: Products
    header_row: 1
    error_column: 10
    record:
      name: Product
      fields:
        - {name: code, type: text, headers: [Code, SKU], required: true}
        - {name: price, type: float, letter: C, rules: {exclusiveMinimum: 0}}
        - {name: since, type: date, headers: Since, optional: true, format: "%Y-%m-%d"}

The file is validated against ``mapping_schema.json`` before use.
"""

__all__ = [
    "ConfigError",
    "MappingConfig",
    "SCHEMA_PATH",
    "load_mapping_config",
    "parse_mapping_config",
    "make_record_type",
]

SCHEMA_PATH = Path(__file__).with_name("mapping_schema.json")

_TYPES: dict[str, tuple[Any, FieldKind | None]] = {
    "text": (str, None),
    "int": (int, None),
    "uint": (int, FieldKind.UINT),
    "float": (float, None),
    "bool": (bool, None),
    "datetime": (datetime, None),
    "date": (date, None),
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class MappingConfig:
    """Loaded mapping: the generated record type plus ready-to-use read options."""
    record_type: type
    options: ReadOptions
    source: Path | None = None


def _validate_schema(data: dict[str, Any]) -> None:
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"mapping schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"mapping validation failed: {e.message}") from e


def make_record_type(name: str, fields: list[dict[str, Any]]) -> type:
    """Build a record dataclass from field definitions of a mapping file."""
    seen: set[str] = set()
    specs: list[tuple[str, Any, Any]] = []
    for raw in fields:
        fname = raw["name"]
        if fname in seen:
            raise ConfigError(f"duplicate field name: {fname}")
        if keyword.iskeyword(fname):
            raise ConfigError(f"field name is a Python keyword: {fname}")
        seen.add(fname)
        py_type, kind = _TYPES[raw.get("type", "text")]
        annotation: Any = py_type | None if raw.get("optional") else py_type
        headers = raw.get("headers")
        if not (headers or raw.get("col") or raw.get("letter")):
            headers = [fname]
        hint = excel_field(
            headers,
            col=raw.get("col"),
            letter=raw.get("letter"),
            required=raw.get("required", False),
            fmt=raw.get("format"),
            kind=kind,
            rules=raw.get("rules"),
        )
        specs.append((fname, annotation, hint))
    return dataclasses.make_dataclass(name, specs)


def parse_mapping_config(data: dict[str, Any], source: Path | None = None) -> MappingConfig:
    _validate_schema(data)
    record = data["record"]
    record_type = make_record_type(record.get("name", "Record"), record["fields"])
    validator = None
    if any(f.get("rules") for f in record["fields"]):
        try:
            validator = JsonSchemaValidator.for_type(record_type)
        except ConfigurationError as e:
            raise ConfigError(f"invalid field rules: {e}") from e
    options = ReadOptions(
        sheet_name=data.get("sheet", ""),
        sheet_index=data.get("sheet_index", 0),
        header_row=data.get("header_row", 1),
        first_data_row=data.get("first_data_row"),
        validator=validator,
        error_column=data.get("error_column", 0),
    )
    return MappingConfig(record_type=record_type, options=options, source=source)


def load_mapping_config(path: Path) -> MappingConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"mapping file must be a mapping, got {type(data).__name__}")
    return parse_mapping_config(data, source=path)
