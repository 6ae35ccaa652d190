"""Configuration handling for the issue backfill.

Loads configuration from YAML and environment variables.
Override priority (highest wins):
  1. Environment variables
  2. YAML config file
  3. Dataclass defaults

The resulting BackfillConfig is built once at startup and passed to each
component; nothing below the CLI layer reads the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Default config file location (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "backfill.yaml"

REQUIRED_ENV_VARS = {
    "GITHUB_REPOSITORY": 'Repository in format "owner/repo" (or use GITHUB_OWNER + GITHUB_REPO)',
    "PINECONE_API_KEY": "Pinecone API key",
    "PINECONE_INDEX": "Pinecone index name",
    "GEMINI_API_KEY": "Google Gemini API key",
}

OPTIONAL_ENV_VARS = {
    "GITHUB_TOKEN": "GitHub personal access token (unauthenticated if unset)",
    "PINECONE_NAMESPACE": "Pinecone namespace (default namespace if unset)",
    "BACKFILL_LOG_LEVEL": "Log level (default: INFO)",
    "LOG_DIR": "Directory for rotating log files",
}


def _load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file (uses DEFAULT_CONFIG_PATH if not specified)

    Returns:
        Configuration dictionary, empty dict if file not found or empty

    Raises:
        TypeError: If the YAML file does not contain a mapping at the top level
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path) as f:
            loaded = yaml.safe_load(f)
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise TypeError(
                f"Config file {path} must contain a YAML mapping (dict) at the top level, "
                f"got {type(loaded).__name__}. Expected format: 'key: value' pairs."
            )
        return loaded
    logger.debug(f"Config file not found: {path}")
    return {}


def _get_nested(config: dict, *keys: str, default: Any = None) -> Any:
    """Get a nested value from a dict, returning default on any missing level."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


def parse_repository(
    repository: str | None,
    owner: str | None = None,
    repo: str | None = None,
) -> tuple[str | None, str | None]:
    """Resolve owner and repo from GITHUB_REPOSITORY with per-part fallbacks.

    Args:
        repository: Combined "owner/repo" value
        owner: Fallback owner (GITHUB_OWNER)
        repo: Fallback repository name (GITHUB_REPO)

    Returns:
        (owner, repo), either of which may be None
    """
    parts = repository.split("/") if repository else []
    resolved_owner = parts[0].strip() if len(parts) > 0 and parts[0].strip() else owner
    resolved_repo = parts[1].strip() if len(parts) > 1 and parts[1].strip() else repo
    return resolved_owner or None, resolved_repo or None


@dataclass
class TrackerConfig:
    """GitHub issue tracker settings."""

    owner: str
    repo: str
    token: str | None = None
    api_base_url: str = "https://api.github.com"
    per_page: int = 100
    page_delay_seconds: float = 1.0
    timeout_seconds: float = 30.0

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class EmbeddingConfig:
    """Gemini embedding provider settings."""

    api_key: str
    model_name: str = "models/text-embedding-004"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    dimension: int = 1024
    fallback_value: float = 0.01
    timeout_seconds: float = 30.0


@dataclass
class VectorStoreConfig:
    """Pinecone index settings."""

    api_key: str
    index_name: str
    namespace: str = ""
    list_page_size: int = 100


@dataclass
class BatchConfig:
    """Chunking and pacing policy for the upsert phase."""

    chunk_size: int = 10
    item_delay_seconds: float = 0.5
    chunk_delay_seconds: float = 2.0


@dataclass
class BackfillConfig:
    """Configuration resolved from YAML + environment variables."""

    tracker: TrackerConfig
    embedding: EmbeddingConfig
    vector_store: VectorStoreConfig
    batch: BatchConfig = field(default_factory=BatchConfig)
    log_level: str = "INFO"


def _require(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ValueError(f"{name} environment variable is required")
    return value


def get_config(config_path: Path | None = None) -> BackfillConfig:
    """Load configuration from YAML and environment variables.

    Required environment variables:
        GITHUB_REPOSITORY (or GITHUB_OWNER + GITHUB_REPO)
        PINECONE_API_KEY, PINECONE_INDEX, GEMINI_API_KEY

    Secrets are read from the environment only, never from YAML.

    Returns:
        BackfillConfig with resolved values

    Raises:
        ValueError: If required settings are missing or malformed
    """
    yaml_config = _load_yaml_config(config_path)

    owner, repo = parse_repository(
        os.environ.get("GITHUB_REPOSITORY"),
        os.environ.get("GITHUB_OWNER"),
        os.environ.get("GITHUB_REPO"),
    )
    if not owner or not repo:
        raise ValueError(
            "Repository owner and name must be specified via GITHUB_REPOSITORY "
            "or GITHUB_OWNER/GITHUB_REPO environment variables"
        )

    pinecone_key = _require("PINECONE_API_KEY")
    index_name = _require("PINECONE_INDEX")
    gemini_key = _require("GEMINI_API_KEY")

    tracker_yaml = yaml_config.get("tracker", {})
    tracker_config = TrackerConfig(
        owner=owner,
        repo=repo,
        token=os.environ.get("GITHUB_TOKEN") or None,
        api_base_url=_get_nested(tracker_yaml, "api_base_url", default="https://api.github.com"),
        per_page=_get_nested(tracker_yaml, "per_page", default=100),
        page_delay_seconds=_get_nested(tracker_yaml, "page_delay_seconds", default=1.0),
        timeout_seconds=_get_nested(tracker_yaml, "timeout_seconds", default=30.0),
    )

    embedding_yaml = yaml_config.get("embedding", {})
    embedding_config = EmbeddingConfig(
        api_key=gemini_key,
        model_name=_get_nested(embedding_yaml, "model", "name", default="models/text-embedding-004"),
        base_url=_get_nested(
            embedding_yaml, "base_url", default="https://generativelanguage.googleapis.com/v1beta"
        ),
        dimension=_get_nested(embedding_yaml, "model", "dimension", default=1024),
        fallback_value=_get_nested(embedding_yaml, "fallback_value", default=0.01),
        timeout_seconds=_get_nested(embedding_yaml, "timeout_seconds", default=30.0),
    )

    vector_yaml = yaml_config.get("vector_store", {})
    vector_store_config = VectorStoreConfig(
        api_key=pinecone_key,
        index_name=index_name,
        namespace=os.environ.get("PINECONE_NAMESPACE") or _get_nested(vector_yaml, "namespace", default=""),
        list_page_size=_get_nested(vector_yaml, "list_page_size", default=100),
    )

    batch_config = BatchConfig(
        chunk_size=_get_nested(yaml_config, "batch", "chunk_size", default=10),
        item_delay_seconds=_get_nested(yaml_config, "batch", "item_delay_seconds", default=0.5),
        chunk_delay_seconds=_get_nested(yaml_config, "batch", "chunk_delay_seconds", default=2.0),
    )
    if batch_config.chunk_size <= 0:
        raise ValueError(f"batch.chunk_size must be >= 1, got: {batch_config.chunk_size}")
    if embedding_config.dimension <= 0:
        raise ValueError(f"embedding.model.dimension must be >= 1, got: {embedding_config.dimension}")

    log_level = os.environ.get("BACKFILL_LOG_LEVEL") or _get_nested(yaml_config, "logging", "level", default="INFO")

    return BackfillConfig(
        tracker=tracker_config,
        embedding=embedding_config,
        vector_store=vector_store_config,
        batch=batch_config,
        log_level=log_level,
    )
