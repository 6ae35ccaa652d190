"""Command-line interface for the issue backfill."""
