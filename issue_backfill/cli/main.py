"""Issue backfill CLI - Main entry point.

Backfills a Pinecone index with Gemini embeddings of a GitHub repository's
existing open issues. The result is printed as JSON on stdout; progress and
the summary table go to stderr.

Usage:
    issue-backfill                          # run with environment config
    issue-backfill --config backfill.yaml   # override YAML defaults
    issue-backfill --help
"""

from __future__ import annotations

from pathlib import Path

import typer

from issue_backfill.cli.config import OPTIONAL_ENV_VARS, REQUIRED_ENV_VARS
from issue_backfill.cli.decorators import cli_command
from issue_backfill.cli.output import CLIResponse, ErrorCode
from issue_backfill.services.github_client import TrackerError
from issue_backfill.services.vector_store import VectorStoreError


def _env_help() -> str:
    lines = ["\b", "Required environment variables:"]
    lines += [f"  {name:<20} {desc}" for name, desc in REQUIRED_ENV_VARS.items()]
    lines += ["", "\b", "Optional environment variables:"]
    lines += [f"  {name:<20} {desc}" for name, desc in OPTIONAL_ENV_VARS.items()]
    return "\n".join(lines)


# Note: rich_markup_mode=None disables rich help formatting to avoid
# typer/click compatibility issues with Parameter.make_metavar()
app = typer.Typer(
    name="issue-backfill",
    help="Populate the vector index with embeddings of existing open GitHub issues.",
    add_completion=False,
    rich_markup_mode=None,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command("populate", epilog=_env_help())
@cli_command(
    "populate",
    ErrorCode.PROCESSING_FAILED,
    {TrackerError: ErrorCode.NETWORK_ERROR, VectorStoreError: ErrorCode.DATABASE_ERROR},
)
def populate(
    config: Path = typer.Option(None, "--config", "-c", help="YAML config file (default: bundled backfill.yaml)"),
    log_level: str = typer.Option(None, "--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    start_time: float = typer.Option(0.0, hidden=True),  # Injected by decorator
) -> CLIResponse:
    """Populate the vector index with existing open issues.

    Issues already present in the index (matched by issue number) are
    skipped, so the command is safe to re-run.

    Examples:
        issue-backfill
        issue-backfill --log-level DEBUG
    """
    from issue_backfill.cli.commands.populate import populate_issues

    return populate_issues(config, start_time=start_time, log_level=log_level)


if __name__ == "__main__":
    app()
