"""End-of-run summary."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table

from issue_backfill.processors.batch import RunReport

NOTHING_TO_DO = "nothing to do"


def summarize(report: RunReport) -> dict[str, Any]:
    """Summary data for the final JSON response."""
    summary = report.to_dict()
    rate = report.success_rate
    if rate is None:
        summary["message"] = NOTHING_TO_DO
    else:
        summary["message"] = (
            f"Upserted {report.succeeded} of {report.processed} processed issues ({rate:.1f}% success)"
        )
    return summary


def render_summary(report: RunReport, console: Console) -> None:
    """Print the summary as a table."""
    table = Table(title="Backfill summary", show_header=False)
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("Processed", str(report.processed))
    table.add_row("Succeeded", str(report.succeeded))
    table.add_row("Failed", str(report.failed))
    table.add_row("Chunks", str(report.chunks))
    rate = report.success_rate
    table.add_row("Success rate", f"{rate:.1f}%" if rate is not None else NOTHING_TO_DO)
    console.print(table)
