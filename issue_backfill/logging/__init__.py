"""Structured logging for the issue backfill."""

from issue_backfill.logging.logging import LogManager

__all__ = ["LogManager"]
