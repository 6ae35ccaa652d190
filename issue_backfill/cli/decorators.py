"""CLI command decorator for the issue backfill.

Wraps a command so that it always ends with one JSON CLIResponse on
stdout and exit status 0 on success, 1 otherwise.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import typer

from issue_backfill.cli.output import (
    CLIResponse,
    ErrorCode,
    error_response,
    print_response,
)

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def error_code_for(
    error: Exception,
    error_codes: Mapping[type[Exception], ErrorCode],
    default: ErrorCode,
) -> ErrorCode:
    """First code whose exception type matches `error`, else `default`."""
    for exc_type, code in error_codes.items():
        if isinstance(error, exc_type):
            return code
    return default


def cli_command(
    command_name: str,
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    error_codes: Mapping[type[Exception], ErrorCode] | None = None,
) -> Callable[[F], F]:
    """Decorator that turns a command returning CLIResponse into a CLI entry point.

    The wrapped function receives `start_time` as a keyword argument. An
    exception escaping it is logged with its traceback and reported as an
    error response; `error_codes` maps exception types (the tracker and
    vector store errors, say) to their codes, anything else gets
    `error_code`.

    Usage:
        @app.command("populate")
        @cli_command("populate", ErrorCode.PROCESSING_FAILED, {TrackerError: ErrorCode.NETWORK_ERROR})
        def populate(..., start_time: float = 0.0) -> CLIResponse:
            return populate_issues(config, start_time=start_time)
    """
    codes = dict(error_codes or {})

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> None:
            start_time = time.time()
            # typer passes the hidden option's default; the real value is injected here
            kwargs.pop("start_time", None)

            try:
                response = func(*args, start_time=start_time, **kwargs)
            except typer.Exit:
                raise
            except Exception as e:
                logger.exception(f"{command_name} aborted")
                response = error_response(
                    command=command_name,
                    code=error_code_for(e, codes, error_code),
                    message=str(e),
                    start_time=start_time,
                )

            if isinstance(response, CLIResponse):
                print_response(response)
                if not response.success:
                    raise typer.Exit(1)

        return wrapper  # type: ignore[return-value]

    return decorator
