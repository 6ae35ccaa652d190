"""Tests for issue and index record models."""

import pytest
from pydantic import ValidationError

from issue_backfill.models import IndexRecord, Issue, record_id


def _payload(**overrides):
    payload = {
        "number": 7,
        "title": "Crash on save",
        "body": "Steps to reproduce",
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
        "html_url": "https://github.com/acme/widgets/issues/7",
        "state": "open",
        "labels": [{"name": "bug"}, {"name": "ui"}],
        "user": {"login": "octocat"},
    }
    payload.update(overrides)
    return payload


class TestIssueFromApi:
    """Tests for Issue.from_api."""

    def test_maps_api_fields(self):
        issue = Issue.from_api(_payload())
        assert issue.number == 7
        assert issue.url == "https://github.com/acme/widgets/issues/7"
        assert issue.labels == ("bug", "ui")
        assert issue.author == "octocat"

    def test_accepts_plain_string_labels(self):
        issue = Issue.from_api(_payload(labels=["bug", "help wanted"]))
        assert issue.labels == ("bug", "help wanted")

    def test_missing_user_leaves_author_unset(self):
        issue = Issue.from_api(_payload(user=None))
        assert issue.author is None

    def test_missing_number_is_rejected(self):
        with pytest.raises(ValidationError):
            Issue.from_api(_payload(number=None))

    def test_embedding_text_joins_title_and_body(self):
        assert Issue.from_api(_payload()).embedding_text == "Crash on save Steps to reproduce"

    def test_embedding_text_with_null_body(self):
        assert Issue.from_api(_payload(body=None)).embedding_text == "Crash on save "

    def test_issue_is_frozen(self):
        issue = Issue.from_api(_payload())
        with pytest.raises(ValidationError):
            issue.title = "changed"


class TestIndexRecord:
    """Tests for IndexRecord assembly."""

    def test_record_id_format(self):
        assert record_id(42, 1700000000000) == "issue-42-1700000000000"

    def test_from_issue_builds_metadata(self):
        issue = Issue.from_api(_payload())
        record = IndexRecord.from_issue(issue, [0.5, 0.25], 1700000000000)

        assert record.id == "issue-7-1700000000000"
        assert record.values == [0.5, 0.25]
        assert record.metadata.issue_number == 7
        assert record.metadata.content == "Crash on save Steps to reproduce"
        assert record.metadata.labels == "bug, ui"
        assert record.metadata.author == "octocat"

    def test_missing_author_becomes_unknown(self):
        issue = Issue.from_api(_payload(user=None))
        record = IndexRecord.from_issue(issue, [0.0], 1)
        assert record.metadata.author == "unknown"

    def test_no_labels_gives_empty_string(self):
        issue = Issue.from_api(_payload(labels=[]))
        record = IndexRecord.from_issue(issue, [0.0], 1)
        assert record.metadata.labels == ""

    def test_to_vector_drops_null_metadata(self):
        issue = Issue.from_api(_payload(created_at=None))
        vector = IndexRecord.from_issue(issue, [0.1], 1).to_vector()

        assert vector["id"] == "issue-7-1"
        assert vector["values"] == [0.1]
        assert "created_at" not in vector["metadata"]
        assert vector["metadata"]["issue_number"] == 7
