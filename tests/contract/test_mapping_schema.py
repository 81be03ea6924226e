from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema import Draft202012Validator

from sheetbind.config.loader import SCHEMA_PATH


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_is_valid(schema):
    Draft202012Validator.check_schema(schema)


def test_minimal_mapping_is_valid(schema):
    jsonschema.validate({"record": {"fields": [{"name": "code"}]}}, schema)


@pytest.mark.parametrize(
    "doc",
    [
        {},
        {"record": {"fields": [{"name": "code", "type": "decimal"}]}},
        {"record": {"fields": [{"name": "code", "col": 0}]}},
        {"record": {"fields": [{"name": "code", "letter": "A1"}]}},
        {"record": {"fields": []}, "unknown": 1},
    ],
)
def test_invalid_mappings_rejected(schema, doc):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(doc, schema)
