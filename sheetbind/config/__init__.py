"""YAML mapping files validated with JSON Schema."""
