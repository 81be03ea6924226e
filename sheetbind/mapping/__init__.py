"""Record mapping engine: metadata, column resolution, conversion, row mapping."""
