"""
GitHub REST client.

Thin wrapper over the issues listing endpoint. Pagination and pacing are
the caller's job (see processors.issues); this client makes exactly one
request per call and raises TrackerError on any failure.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

if TYPE_CHECKING:
    from issue_backfill.cli.config import TrackerConfig

logger = logging.getLogger(__name__)

USER_AGENT = "issue-backfill/0.1"


class TrackerError(Exception):
    """Error listing issues from the tracker."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """
    Client for the GitHub issues API.

    Sends a bearer token when one is configured; otherwise requests are
    unauthenticated and subject to the lower anonymous rate limit.
    """

    def __init__(self, config: TrackerConfig, session: requests.Session | None = None):
        """
        Initialize the client.

        Args:
            config: Tracker settings (token, base URL, timeout)
            session: Optional session to use instead of a new one
        """
        self.api_base_url = config.api_base_url.rstrip("/")
        self.timeout = config.timeout_seconds

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": USER_AGENT,
            }
        )
        if config.token:
            self.session.headers["Authorization"] = f"Bearer {config.token}"

        logger.info(
            f"Initialized GitHub client for {self.api_base_url} "
            f"({'authenticated' if config.token else 'unauthenticated'})"
        )

    def list_issues(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        page: int = 1,
        per_page: int = 100,
    ) -> list[dict[str, Any]]:
        """
        Fetch one page of issues (pull requests included, as GitHub returns them).

        Args:
            owner: Repository owner
            repo: Repository name
            state: Issue state filter
            page: 1-based page number
            per_page: Page size (GitHub caps this at 100)

        Returns:
            Raw issue dicts as returned by the API

        Raises:
            TrackerError: On transport failure, non-2xx status or a non-list body
        """
        url = f"{self.api_base_url}/repos/{owner}/{repo}/issues"
        params = {"state": state, "per_page": per_page, "page": page}

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TrackerError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise TrackerError(
                f"GitHub returned HTTP {response.status_code} for {owner}/{repo} issues page {page}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TrackerError(f"GitHub returned a non-JSON body for page {page}") from e

        if not isinstance(data, list):
            raise TrackerError(f"GitHub returned {type(data).__name__} instead of a list for page {page}")

        return data

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
