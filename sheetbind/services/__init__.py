"""Reporting helpers used by the CLI: summaries, progress and error tables."""
