"""Tests for the GitHub REST client."""

from unittest.mock import MagicMock

import pytest
import requests

from issue_backfill.cli.config import TrackerConfig
from issue_backfill.services.github_client import GitHubClient, TrackerError


def _response(status_code=200, json_body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if isinstance(json_body, Exception):
        response.json.side_effect = json_body
    else:
        response.json.return_value = json_body
    return response


def _client(token=None):
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    config = TrackerConfig(owner="acme", repo="widgets", token=token)
    return GitHubClient(config, session=session), session


class TestGitHubClientInit:
    """Tests for session setup."""

    def test_sets_bearer_token_when_configured(self):
        _, session = _client(token="ghp_test")
        assert session.headers["Authorization"] == "Bearer ghp_test"
        assert session.headers["Accept"] == "application/vnd.github+json"

    def test_unauthenticated_without_token(self):
        _, session = _client()
        assert "Authorization" not in session.headers

    def test_session_transport_is_left_as_is(self):
        # failed page requests are not retried, so no adapter is mounted
        _, session = _client()
        session.mount.assert_not_called()


class TestListIssues:
    """Tests for list_issues."""

    def test_requests_one_page(self):
        client, session = _client()
        session.get.return_value = _response(json_body=[{"number": 1}])

        result = client.list_issues("acme", "widgets", state="open", page=3, per_page=100)

        assert result == [{"number": 1}]
        session.get.assert_called_once_with(
            "https://api.github.com/repos/acme/widgets/issues",
            params={"state": "open", "per_page": 100, "page": 3},
            timeout=30.0,
        )

    def test_http_error_raises_tracker_error(self):
        client, session = _client()
        session.get.return_value = _response(status_code=404, text="Not Found")

        with pytest.raises(TrackerError) as exc_info:
            client.list_issues("acme", "widgets")
        assert exc_info.value.status_code == 404

    def test_transport_error_raises_tracker_error(self):
        client, session = _client()
        session.get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(TrackerError, match="unreachable"):
            client.list_issues("acme", "widgets")

    def test_non_json_body_raises_tracker_error(self):
        client, session = _client()
        session.get.return_value = _response(json_body=ValueError("bad json"))

        with pytest.raises(TrackerError, match="non-JSON"):
            client.list_issues("acme", "widgets")

    def test_non_list_body_raises_tracker_error(self):
        client, session = _client()
        session.get.return_value = _response(json_body={"message": "rate limited"})

        with pytest.raises(TrackerError, match="instead of a list"):
            client.list_issues("acme", "widgets")
