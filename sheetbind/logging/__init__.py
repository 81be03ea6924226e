"""Logging setup and JSON Lines error logs."""
