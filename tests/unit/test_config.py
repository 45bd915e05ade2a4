"""Unit tests for Settings defaults and the YAML publication registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from newsrag.config.loader import load_config, publication_configs
from newsrag.config.settings import Settings
from newsrag.utils.errors import ConfigurationError


class TestSettingsDefaults:
    def test_pipeline_constants(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.scrape_concurrency == 8
        assert settings.chunk_concurrency == 8
        assert settings.embed_concurrency == 64
        assert settings.scrape_max_attempts == 3
        assert settings.scrape_retry_delay_seconds == 0.5
        assert settings.thin_story_max_blocks == 3
        assert settings.search_top_k == 8
        assert settings.search_similarity_threshold == 0.78
        assert settings.context_word_budget == 768
        assert settings.min_query_length == 8

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("SCRAPE_CONCURRENCY", "2")
        assert Settings(_env_file=None).scrape_concurrency == 2


class TestLoadConfig:
    def test_publications_read_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "publications:\n  yle:\n    type: rss\n"
            "    feed_url: https://feeds.example/yle.rss\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        publications = publication_configs(config)
        assert publications["yle"].feed_url == "https://feeds.example/yle.rss"

    def test_faker_always_registered(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "missing.yaml"))
        assert set(publication_configs(config)) == {"faker"}

    def test_rss_without_feed_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            publication_configs({"publications": {"bad": {"type": "rss"}}})

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            publication_configs({"publications": {"bad": {"type": "carrier-pigeon"}}})

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_repository_config_is_valid(self) -> None:
        root = Path(__file__).resolve().parents[2]
        config = load_config(str(root / "config" / "config.yaml"))
        assert {"faker", "yle"} <= set(publication_configs(config))
