"""Shared test configuration."""

import os

import pytest

REQUIRED_ENV = {
    "GITHUB_REPOSITORY": "acme/widgets",
    "PINECONE_API_KEY": "pc-test-key",
    "PINECONE_INDEX": "issues-test",
    "GEMINI_API_KEY": "gm-test-key",
}

BACKFILL_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "PINECONE_API_KEY",
    "PINECONE_INDEX",
    "PINECONE_NAMESPACE",
    "GEMINI_API_KEY",
    "BACKFILL_LOG_LEVEL",
)


@pytest.fixture(autouse=True, scope="session")
def _log_dir(tmp_path_factory):
    """Keep rotating log files out of the working tree."""
    previous = os.environ.get("LOG_DIR")
    os.environ["LOG_DIR"] = str(tmp_path_factory.mktemp("logs"))
    yield
    if previous is None:
        os.environ.pop("LOG_DIR", None)
    else:
        os.environ["LOG_DIR"] = previous


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every backfill variable from the environment."""
    for name in BACKFILL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def backfill_env(clean_env):
    """Environment with every required variable set."""
    for name, value in REQUIRED_ENV.items():
        clean_env.setenv(name, value)
    return clean_env


def issue_payload(number, title=None, body="Body text", *, labels=("bug",), login="octocat", pull_request=False):
    """A GitHub issues API entry."""
    payload = {
        "number": number,
        "title": title or f"Issue {number}",
        "body": body,
        "created_at": "2024-03-01T10:00:00Z",
        "updated_at": "2024-03-02T11:30:00Z",
        "html_url": f"https://github.com/acme/widgets/issues/{number}",
        "state": "open",
        "labels": [{"name": name} for name in labels],
        "user": {"login": login} if login else None,
    }
    if pull_request:
        payload["pull_request"] = {"url": f"https://api.github.com/repos/acme/widgets/pulls/{number}"}
    return payload


@pytest.fixture
def make_payload():
    return issue_payload
