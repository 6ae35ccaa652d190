"""Backfill a vector index with embeddings of a repository's open issues.

Subpackages:
- cli: entry point, configuration, JSON output
- embedders: text -> fixed-width vector with degraded-mode fallback
- processors: fetch, dedup, batch upsert, summary
- services: GitHub and Pinecone clients
- logging: structlog setup
"""
