"""Validator collaborators run against fully populated records."""

from .base import ValidationFailure, Validator
from .schema import JsonSchemaValidator

__all__ = [
    "ValidationFailure",
    "Validator",
    "JsonSchemaValidator",
]
