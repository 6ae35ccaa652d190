"""Pipeline stages: fetch, resolve existing state, dedup, upsert, report."""

from issue_backfill.processors.batch import BatchUpsertOrchestrator, RunReport
from issue_backfill.processors.dedup import select_new
from issue_backfill.processors.existing import load_existing_issue_numbers
from issue_backfill.processors.issues import IssueFetcher, RejectedEntry, is_pull_request
from issue_backfill.processors.pacing import NullPacer, Pacer, SleepPacer
from issue_backfill.processors.report import render_summary, summarize

__all__ = [
    "BatchUpsertOrchestrator",
    "IssueFetcher",
    "NullPacer",
    "Pacer",
    "RejectedEntry",
    "RunReport",
    "SleepPacer",
    "is_pull_request",
    "load_existing_issue_numbers",
    "render_summary",
    "select_new",
    "summarize",
]
