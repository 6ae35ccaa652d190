"""Clients for the tracker and the vector store."""

from issue_backfill.services.github_client import GitHubClient, TrackerError
from issue_backfill.services.vector_store import PineconeVectorStore, VectorStoreError

__all__ = [
    "GitHubClient",
    "PineconeVectorStore",
    "TrackerError",
    "VectorStoreError",
]
