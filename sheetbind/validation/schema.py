from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from typing import Any

import jsonschema
from jsonschema.exceptions import SchemaError

from ..errors import ConfigurationError
from ..mapping.registry import TypeRegistry, descriptor_for
from .base import ValidationFailure

"""JSON-Schema based validator.

Each mapped field may carry a ``rules`` fragment (e.g. ``{"minimum": 0}``);
``for_type`` assembles them into an object schema. Required flags are enforced
by the row mapper, not here. Absent (None) values are left out of the validated
instance so that per-field rules only apply to present values.
"""

__all__ = [
    "JsonSchemaValidator",
    "schema_for_type",
]


def schema_for_type(record_type: type, registry: TypeRegistry | None = None) -> dict[str, Any]:
    td = descriptor_for(record_type, registry)
    properties: dict[str, Any] = {}
    for fd in td.fields:
        if fd.rules:
            properties[fd.name] = dict(fd.rules)
    return {"type": "object", "properties": properties}


class JsonSchemaValidator:
    """Validator backed by ``jsonschema``.

    The schema is checked once at construction; an invalid schema is a
    configuration error raised before any row is read.
    """

    def __init__(self, schema: dict[str, Any]) -> None:
        cls = jsonschema.validators.validator_for(schema)
        try:
            cls.check_schema(schema)
        except SchemaError as e:
            raise ConfigurationError(f"invalid validation schema: {e.message}") from e
        self.schema = schema
        self._validator = cls(schema)

    @classmethod
    def for_type(cls, record_type: type, registry: TypeRegistry | None = None) -> JsonSchemaValidator:
        return cls(schema_for_type(record_type, registry))

    @staticmethod
    def _instance(record: Any) -> Any:
        if dataclasses.is_dataclass(record) and not isinstance(record, type):
            data = {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}
        elif isinstance(record, dict):
            data = dict(record)
        else:
            return record
        return {k: v for k, v in data.items() if v is not None}

    def iter_failures(self, record: Any) -> Iterator[ValidationFailure]:
        instance = self._instance(record)
        # one "required" error per missing property, in declaration order
        missing: Iterator[str] = iter(())
        if isinstance(instance, dict):
            missing = iter([n for n in self.schema.get("required", ()) if n not in instance])
        for error in self._validator.iter_errors(instance):
            if error.absolute_path:
                field = str(error.absolute_path[0])
            elif error.validator == "required":
                field = next(missing, "")
            else:
                field = ""
            yield ValidationFailure(
                field=field,
                rule=str(error.validator),
                message=error.message,
            )

    def validate(self, record: Any) -> list[ValidationFailure]:
        return list(self.iter_failures(record))
