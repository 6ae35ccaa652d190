"""Chunked embed-and-upsert with per-item error isolation.

New issues are processed in fixed-size chunks:
- each issue is embedded and assembled into an IndexRecord; a failure
  there is counted and the run moves on to the next issue
- each chunk's records go to the vector store in one upsert call; if
  that call fails, every record of the chunk is counted failed
- fixed delays after each assembled item and between chunks

Usage:
    orchestrator = BatchUpsertOrchestrator(embedder, store, pacer=SleepPacer())
    report = orchestrator.run(new_issues, rejected=fetcher.rejected)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from issue_backfill.cli.config import BatchConfig
from issue_backfill.cli.output import progress
from issue_backfill.models import IndexRecord, Issue
from issue_backfill.processors.issues import RejectedEntry
from issue_backfill.processors.pacing import Pacer, SleepPacer

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    def embed(self, text: str) -> list[float]: ...


class UpsertStore(Protocol):
    def upsert(self, records: Sequence[IndexRecord]) -> int: ...


def epoch_millis() -> int:
    return int(time.time() * 1000)


def chunked(items: Sequence[Issue], size: int) -> list[Sequence[Issue]]:
    """Split `items` into consecutive slices of at most `size`."""
    if size <= 0:
        raise ValueError(f"chunk size must be >= 1, got: {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]


@dataclass
class RunReport:
    """Counters for one backfill run."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    chunks: int = 0
    failures: dict[int, str] = field(default_factory=dict)  # issue number -> error

    def record_failure(self, number: int | None, message: str) -> None:
        """Count one item that never reached the store; unnumbered items are counted only."""
        self.failed += 1
        if number is not None:
            self.failures[number] = message

    @property
    def success_rate(self) -> float | None:
        """Percentage of processed items that were upserted, None when nothing was processed."""
        if self.processed == 0:
            return None
        return self.succeeded / self.processed * 100

    def to_dict(self) -> dict[str, Any]:
        rate = self.success_rate
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "chunks": self.chunks,
            "success_rate": round(rate, 1) if rate is not None else None,
            "failures": {str(number): message for number, message in self.failures.items()},
        }


class BatchUpsertOrchestrator:
    """Embeds new issues and upserts them chunk by chunk.

    Attributes:
        chunk_size: Issues per upsert call
        item_delay_seconds: Wait after each successfully assembled item
        chunk_delay_seconds: Wait between consecutive chunks
    """

    def __init__(
        self,
        embedder: Embedder,
        store: UpsertStore,
        pacer: Pacer | None = None,
        config: BatchConfig | None = None,
        clock: Callable[[], int] = epoch_millis,
    ):
        config = config or BatchConfig()
        self.embedder = embedder
        self.store = store
        self.pacer = pacer or SleepPacer()
        self.clock = clock
        self.chunk_size = config.chunk_size
        self.item_delay_seconds = config.item_delay_seconds
        self.chunk_delay_seconds = config.chunk_delay_seconds

    def _build_record(self, issue: Issue) -> IndexRecord:
        values = self.embedder.embed(issue.embedding_text)
        return IndexRecord.from_issue(issue, values, self.clock())

    def run(self, new_issues: Sequence[Issue], rejected: Sequence[RejectedEntry] = ()) -> RunReport:
        """Process `new_issues` and return the run's counters.

        Entries in `rejected` could not be parsed at fetch time; each is
        counted failed before the first chunk. Never raises for per-item
        or per-chunk failures.
        """
        report = RunReport()
        for entry in rejected:
            report.record_failure(entry.number, entry.reason)
            logger.error(f"Failed to prepare tracker entry #{entry.number} (page {entry.page}): {entry.reason}")

        chunks = chunked(list(new_issues), self.chunk_size)

        for chunk_index, chunk in enumerate(chunks, start=1):
            if chunk_index > 1:
                self.pacer.wait(self.chunk_delay_seconds)

            progress(f"Processing chunk {chunk_index}/{len(chunks)} ({len(chunk)} issues)...")
            report.chunks += 1
            pending: list[IndexRecord] = []

            for issue in chunk:
                try:
                    record = self._build_record(issue)
                except Exception as e:
                    report.record_failure(issue.number, str(e))
                    logger.error(f"Failed to prepare issue #{issue.number}: {e}")
                    continue

                report.processed += 1
                pending.append(record)
                self.pacer.wait(self.item_delay_seconds)

            if not pending:
                continue

            try:
                self.store.upsert(pending)
            except Exception as e:
                report.failed += len(pending)
                for record in pending:
                    report.failures[record.metadata.issue_number] = f"upsert failed: {e}"
                logger.error(f"Upsert of chunk {chunk_index} ({len(pending)} records) failed: {e}")
                continue

            report.succeeded += len(pending)
            logger.info(f"Upserted chunk {chunk_index}: {len(pending)} records")

        return report
