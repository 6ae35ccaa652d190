"""Tests for backfill configuration loading."""

from pathlib import Path

import pytest

from issue_backfill.cli.config import (
    DEFAULT_CONFIG_PATH,
    BackfillConfig,
    _get_nested,
    _load_yaml_config,
    get_config,
    parse_repository,
)


class TestGetNested:
    """Tests for _get_nested helper function."""

    def test_gets_nested_value(self):
        config = {"level1": {"level2": {"level3": "deep_value"}}}
        assert _get_nested(config, "level1", "level2", "level3") == "deep_value"

    def test_returns_default_for_missing_key(self):
        assert _get_nested({"key": "value"}, "missing", default="default") == "default"

    def test_handles_non_dict_intermediate(self):
        config = {"level1": "not_a_dict"}
        assert _get_nested(config, "level1", "level2", default="default") == "default"


class TestLoadYamlConfig:
    """Tests for YAML config loading."""

    def test_bundled_config_exists(self):
        assert DEFAULT_CONFIG_PATH.exists()
        loaded = _load_yaml_config()
        assert loaded["batch"]["chunk_size"] == 10

    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert _load_yaml_config(tmp_path / "absent.yaml") == {}

    def test_empty_file_returns_empty(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert _load_yaml_config(path) == {}

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(TypeError, match="YAML mapping"):
            _load_yaml_config(path)


class TestParseRepository:
    """Tests for owner/repo resolution."""

    def test_combined_value(self):
        assert parse_repository("acme/widgets") == ("acme", "widgets")

    def test_combined_value_wins_over_parts(self):
        assert parse_repository("acme/widgets", "other", "thing") == ("acme", "widgets")

    def test_falls_back_to_parts(self):
        assert parse_repository(None, "acme", "widgets") == ("acme", "widgets")

    def test_falls_back_per_part(self):
        assert parse_repository("acme", None, "widgets") == ("acme", "widgets")

    def test_nothing_set(self):
        assert parse_repository(None) == (None, None)


class TestGetConfig:
    """Tests for get_config."""

    def test_defaults(self, backfill_env):
        config = get_config()

        assert isinstance(config, BackfillConfig)
        assert config.tracker.owner == "acme"
        assert config.tracker.repo == "widgets"
        assert config.tracker.token is None
        assert config.tracker.per_page == 100
        assert config.tracker.page_delay_seconds == 1.0
        assert config.embedding.dimension == 1024
        assert config.embedding.fallback_value == 0.01
        assert config.embedding.model_name == "models/text-embedding-004"
        assert config.vector_store.index_name == "issues-test"
        assert config.vector_store.namespace == ""
        assert config.batch.chunk_size == 10
        assert config.batch.item_delay_seconds == 0.5
        assert config.batch.chunk_delay_seconds == 2.0
        assert config.log_level == "INFO"

    def test_owner_and_repo_from_separate_vars(self, backfill_env):
        backfill_env.delenv("GITHUB_REPOSITORY")
        backfill_env.setenv("GITHUB_OWNER", "octo")
        backfill_env.setenv("GITHUB_REPO", "cat")

        config = get_config()
        assert config.tracker.repository == "octo/cat"

    def test_token_is_optional(self, backfill_env):
        backfill_env.setenv("GITHUB_TOKEN", "ghp_test")
        assert get_config().tracker.token == "ghp_test"

    def test_missing_repository_raises(self, backfill_env):
        backfill_env.delenv("GITHUB_REPOSITORY")
        with pytest.raises(ValueError, match="GITHUB_REPOSITORY"):
            get_config()

    @pytest.mark.parametrize("name", ["PINECONE_API_KEY", "PINECONE_INDEX", "GEMINI_API_KEY"])
    def test_missing_required_key_raises(self, backfill_env, name):
        backfill_env.delenv(name)
        with pytest.raises(ValueError, match=name):
            get_config()

    def test_yaml_overrides_defaults(self, backfill_env, tmp_path: Path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "batch:\n  chunk_size: 5\n"
            "embedding:\n  model:\n    dimension: 768\n"
            "vector_store:\n  namespace: issues\n"
        )

        config = get_config(path)
        assert config.batch.chunk_size == 5
        assert config.batch.item_delay_seconds == 0.5
        assert config.embedding.dimension == 768
        assert config.vector_store.namespace == "issues"

    def test_env_overrides_yaml(self, backfill_env, tmp_path: Path):
        path = tmp_path / "custom.yaml"
        path.write_text("vector_store:\n  namespace: from-yaml\nlogging:\n  level: WARNING\n")
        backfill_env.setenv("PINECONE_NAMESPACE", "from-env")
        backfill_env.setenv("BACKFILL_LOG_LEVEL", "DEBUG")

        config = get_config(path)
        assert config.vector_store.namespace == "from-env"
        assert config.log_level == "DEBUG"

    def test_invalid_chunk_size_raises(self, backfill_env, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("batch:\n  chunk_size: 0\n")
        with pytest.raises(ValueError, match="chunk_size"):
            get_config(path)
