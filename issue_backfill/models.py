"""Pydantic models for issues and index records.

Issues are parsed from the GitHub REST payload and never mutated. Index
records are what the batch orchestrator hands to the vector store.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

IssueState = Literal["open", "closed"]

UNKNOWN_AUTHOR = "unknown"


def record_id(issue_number: int, timestamp_ms: int) -> str:
    """Build the composite vector id for an issue."""
    return f"issue-{issue_number}-{timestamp_ms}"


class Issue(BaseModel):
    """An open issue as returned by the tracker."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    number: int
    title: str
    body: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    url: str = ""
    state: IssueState = "open"
    labels: tuple[str, ...] = ()
    author: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Issue:
        """Build an Issue from a GitHub issues API entry."""
        labels = []
        for label in payload.get("labels") or []:
            if isinstance(label, dict):
                name = label.get("name")
            else:
                name = label
            if name:
                labels.append(str(name))

        user = payload.get("user") or {}

        return cls(
            number=payload.get("number"),
            title=payload.get("title"),
            body=payload.get("body"),
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
            url=payload.get("html_url") or "",
            state=payload.get("state") or "open",
            labels=tuple(labels),
            author=user.get("login") if isinstance(user, dict) else None,
        )

    @property
    def embedding_text(self) -> str:
        """Text sent to the embedding provider."""
        return f"{self.title} {self.body or ''}"


class IssueMetadata(BaseModel):
    """Metadata stored alongside each vector."""

    model_config = ConfigDict(extra="forbid")

    issue_number: int
    title: str
    content: str
    created_at: str | None = None
    updated_at: str | None = None
    url: str = ""
    state: IssueState = "open"
    labels: str = ""
    author: str = UNKNOWN_AUTHOR


class IndexRecord(BaseModel):
    """A single vector ready for upsert."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    values: list[float]
    metadata: IssueMetadata

    @classmethod
    def from_issue(cls, issue: Issue, values: list[float], timestamp_ms: int) -> IndexRecord:
        """Assemble the record for an issue and its embedding."""
        return cls(
            id=record_id(issue.number, timestamp_ms),
            values=values,
            metadata=IssueMetadata(
                issue_number=issue.number,
                title=issue.title,
                content=issue.embedding_text,
                created_at=issue.created_at,
                updated_at=issue.updated_at,
                url=issue.url,
                state=issue.state,
                labels=", ".join(issue.labels),
                author=issue.author or UNKNOWN_AUTHOR,
            ),
        )

    def to_vector(self) -> dict[str, Any]:
        """Convert to the vector store's upsert shape.

        Pinecone rejects null metadata values, so unset fields are dropped.
        """
        return {
            "id": self.id,
            "values": self.values,
            "metadata": self.metadata.model_dump(exclude_none=True),
        }
