"""Populate command: backfill the vector index with existing open issues.

Fetches every open issue of the configured repository, skips the ones
whose number is already stored in the index, embeds the rest and upserts
them in chunks. Running it twice against an unchanged repository writes
nothing the second time.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from issue_backfill.cli.config import BackfillConfig, get_config
from issue_backfill.cli.output import (
    CLIResponse,
    ErrorCode,
    error_response,
    progress,
    stderr_console,
    success_response,
    warn,
)
from issue_backfill.logging import LogManager
from issue_backfill.processors.batch import (
    BatchUpsertOrchestrator,
    Embedder,
    RunReport,
    UpsertStore,
    epoch_millis,
)
from issue_backfill.processors.dedup import select_new
from issue_backfill.processors.existing import ListableStore, load_existing_issue_numbers
from issue_backfill.processors.issues import IssueFetcher, IssueTracker
from issue_backfill.processors.pacing import Pacer, SleepPacer
from issue_backfill.processors.report import render_summary, summarize
from issue_backfill.services.github_client import TrackerError
from issue_backfill.services.vector_store import VectorStoreError

COMMAND = "populate"

NO_OPEN_ISSUES = "No open issues found. Nothing to populate."
ALL_INDEXED = "All open issues are already in the index. Nothing to add."


class BackfillStore(ListableStore, UpsertStore, Protocol):
    """A vector index that can be listed and upserted into."""


def populate_issues(
    config_path: Path | None,
    start_time: float,
    log_level: str | None = None,
    *,
    tracker: IssueTracker | None = None,
    embedder: Embedder | None = None,
    store: BackfillStore | None = None,
    pacer: Pacer | None = None,
    clock: Callable[[], int] = epoch_millis,
) -> CLIResponse:
    """Load configuration, build the collaborators and run the backfill.

    Collaborators not passed in are built from configuration and closed
    when the run ends.

    Args:
        config_path: Optional YAML config path
        start_time: Start time for duration calculation
        log_level: Overrides the configured log level

    Returns:
        CLIResponse with the run summary
    """
    try:
        config = get_config(config_path)
        if log_level:
            config.log_level = log_level
        LogManager.setup(config.log_level)
    except (ValueError, TypeError) as e:
        return error_response(
            command=COMMAND,
            code=ErrorCode.CONFIG_ERROR,
            message=str(e),
            start_time=start_time,
        )

    closers: list[Callable[[], None]] = []
    if tracker is None:
        from issue_backfill.services.github_client import GitHubClient

        client = GitHubClient(config.tracker)
        closers.append(client.close)
        tracker = client
    if embedder is None:
        from issue_backfill.embedders.embedders_gemini import GeminiEmbedder

        gemini = GeminiEmbedder(config.embedding)
        closers.append(gemini.close)
        embedder = gemini
    if store is None:
        from issue_backfill.services.vector_store import PineconeVectorStore

        store = PineconeVectorStore(config.vector_store)

    try:
        return run_backfill(
            config,
            tracker=tracker,
            embedder=embedder,
            store=store,
            pacer=pacer or SleepPacer(),
            clock=clock,
            start_time=start_time,
        )
    finally:
        for close in closers:
            close()


def run_backfill(
    config: BackfillConfig,
    *,
    tracker: IssueTracker,
    embedder: Embedder,
    store: BackfillStore,
    pacer: Pacer,
    clock: Callable[[], int],
    start_time: float,
) -> CLIResponse:
    """Run fetch, dedup and upsert with already-built collaborators."""
    run_id = uuid.uuid4().hex[:12]
    repository = config.tracker.repository
    log = LogManager.get_logger(COMMAND, run_id, repository=repository, index=config.vector_store.index_name)
    log.info("backfill_started")

    progress(f"Fetching open issues from {repository}...")
    fetcher = IssueFetcher(
        tracker,
        pacer=pacer,
        per_page=config.tracker.per_page,
        page_delay_seconds=config.tracker.page_delay_seconds,
    )
    try:
        issues = fetcher.fetch_all_open_issues(config.tracker.owner, config.tracker.repo)
    except TrackerError as e:
        log.error("fetch_failed", error=str(e), status_code=e.status_code)
        return error_response(
            command=COMMAND,
            code=ErrorCode.NETWORK_ERROR,
            message=f"Failed to fetch issues from {repository}: {e}",
            start_time=start_time,
        )

    fetched = len(issues) + len(fetcher.rejected)
    if fetched == 0:
        log.info("backfill_finished", fetched=0)
        return _done(NO_OPEN_ISSUES, RunReport(), fetched=0, skipped=0, run_id=run_id, start_time=start_time)

    progress(f"Found {fetched} open issues, checking the index for existing entries...")
    try:
        existing = load_existing_issue_numbers(store)
    except VectorStoreError as e:
        log.error("listing_failed", error=str(e))
        return error_response(
            command=COMMAND,
            code=ErrorCode.DATABASE_ERROR,
            message=f"Failed to list existing records in '{config.vector_store.index_name}': {e}",
            start_time=start_time,
        )

    new_issues = select_new(issues, existing)
    # an unparseable entry whose number is already indexed needs no work
    rejected = [entry for entry in fetcher.rejected if entry.number not in existing]
    skipped = fetched - len(new_issues) - len(rejected)
    log.info(
        "dedup_complete",
        fetched=fetched,
        existing=len(existing),
        new=len(new_issues),
        unparseable=len(rejected),
    )

    if not new_issues and not rejected:
        log.info("backfill_finished", fetched=fetched, new=0)
        return _done(ALL_INDEXED, RunReport(), fetched=fetched, skipped=skipped, run_id=run_id, start_time=start_time)

    progress(f"Embedding and upserting {len(new_issues)} new issues ({skipped} already indexed)...")
    orchestrator = BatchUpsertOrchestrator(embedder, store, pacer=pacer, config=config.batch, clock=clock)
    report = orchestrator.run(new_issues, rejected=rejected)

    log.info(
        "backfill_finished",
        fetched=fetched,
        new=len(new_issues),
        processed=report.processed,
        succeeded=report.succeeded,
        failed=report.failed,
    )
    render_summary(report, stderr_console())
    if report.failed:
        warn(f"{report.failed} issues were not indexed; re-run to retry them (details in errors.log)")
    return _done(None, report, fetched=fetched, skipped=skipped, run_id=run_id, start_time=start_time)


def _done(
    message: str | None,
    report: RunReport,
    *,
    fetched: int,
    skipped: int,
    run_id: str,
    start_time: float,
) -> CLIResponse:
    data = summarize(report)
    if message is not None:
        progress(message)
        data["message"] = message
    data["fetched"] = fetched
    data["skipped"] = skipped
    return success_response(command=COMMAND, data=data, start_time=start_time, run_id=run_id)
