"""Paginated fetch of a repository's open issues."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from issue_backfill.cli.output import progress
from issue_backfill.models import Issue
from issue_backfill.processors.existing import coerce_issue_number
from issue_backfill.processors.pacing import Pacer, SleepPacer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RejectedEntry:
    """A tracker entry that could not be parsed into an Issue."""

    number: int | None
    page: int
    reason: str


class IssueTracker(Protocol):
    def list_issues(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        page: int = 1,
        per_page: int = 100,
    ) -> list[dict[str, Any]]: ...


def is_pull_request(entry: dict[str, Any]) -> bool:
    """GitHub lists pull requests as issues carrying a `pull_request` key."""
    return "pull_request" in entry


class IssueFetcher:
    """Collects every open issue of a repository, page by page.

    Attributes:
        per_page: Page size requested from the tracker
        page_delay_seconds: Wait after every page, including the final empty one
        rejected: Entries of the last fetch that failed validation
    """

    def __init__(
        self,
        tracker: IssueTracker,
        pacer: Pacer | None = None,
        per_page: int = 100,
        page_delay_seconds: float = 1.0,
    ):
        self.tracker = tracker
        self.pacer = pacer or SleepPacer()
        self.per_page = per_page
        self.page_delay_seconds = page_delay_seconds
        self.rejected: list[RejectedEntry] = []

    def fetch_all_open_issues(self, owner: str, repo: str) -> list[Issue]:
        """
        Fetch all open issues, excluding pull requests.

        Pages from 1 until the tracker returns an empty page. Entries that
        fail validation are kept in `self.rejected` so the run can count them.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Issues in tracker order

        Raises:
            TrackerError: If any page request fails
        """
        issues: list[Issue] = []
        self.rejected = []
        page = 1

        while True:
            entries = self.tracker.list_issues(owner, repo, state="open", page=page, per_page=self.per_page)
            self.pacer.wait(self.page_delay_seconds)

            if not entries:
                break

            kept = 0
            for entry in entries:
                if is_pull_request(entry):
                    continue
                try:
                    issues.append(Issue.from_api(entry))
                    kept += 1
                except ValidationError as e:
                    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
                    self.rejected.append(
                        RejectedEntry(
                            number=coerce_issue_number(entry.get("number")),
                            page=page,
                            reason=f"unparseable tracker entry: invalid {fields}",
                        )
                    )
                    logger.warning(
                        f"Unparseable tracker entry on page {page} "
                        f"(number={entry.get('number')!r}): {e.error_count()} validation errors"
                    )

            progress(f"Fetched page {page}: {kept} issues")
            page += 1

        logger.info(
            f"Fetched {len(issues)} open issues from {owner}/{repo} in {page} requests "
            f"({len(self.rejected)} unparseable)"
        )
        return issues
