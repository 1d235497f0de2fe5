"""Tests for configuration loading, env overrides and persistence."""

from pathlib import Path

import pytest
import yaml

from revisions.foundation.config import (
    PROJECT_CONFIG_PATH,
    RevisionsConfig,
    load_config,
    save_config_value,
    save_default_config,
)
from revisions.foundation.errors import ConfigError


class TestLoadConfig:
    def test_defaults(self) -> None:
        cfg = load_config()
        assert cfg == RevisionsConfig()
        assert cfg.max_revisions_per_file == 50
        assert cfg.max_content_bytes == 1024 * 1024

    def test_project_file(self) -> None:
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text("max_revisions_per_file: 7\n", encoding="utf-8")
        assert load_config().max_revisions_per_file == 7

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text("max_revisions_per_file: 7\n", encoding="utf-8")
        explicit = tmp_path / "other.yaml"
        explicit.write_text("max_revisions_per_file: 9\n", encoding="utf-8")
        assert load_config(explicit).max_revisions_per_file == 9

    def test_env_overrides_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text("max_revisions_per_file: 7\n", encoding="utf-8")
        monkeypatch.setenv("REVISIONS_MAX_REVISIONS_PER_FILE", "12")
        monkeypatch.setenv("REVISIONS_WATCH_EXTENSIONS", "md, .txt")
        cfg = load_config()
        assert cfg.max_revisions_per_file == 12
        assert cfg.watch_extensions == (".md", ".txt")

    def test_empty_file_uses_defaults(self) -> None:
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text("", encoding="utf-8")
        assert load_config() == RevisionsConfig()

    def test_unreadable_file_is_skipped(self) -> None:
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text("- just\n- a list\n", encoding="utf-8")
        assert load_config() == RevisionsConfig()

    @pytest.mark.parametrize(
        "text",
        [
            "max_revisions_per_file: 0\n",
            "max_revisions_per_file: 1001\n",
            "max_revisions_per_file: lots\n",
            "max_content_bytes: -1\n",
            "watch_debounce_ms: -5\n",
        ],
    )
    def test_invalid_values_raise(self, text: str) -> None:
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text(text, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config()

    def test_each_load_rereads_files(self) -> None:
        assert load_config().max_revisions_per_file == 50
        PROJECT_CONFIG_PATH.parent.mkdir(parents=True)
        PROJECT_CONFIG_PATH.write_text("max_revisions_per_file: 3\n", encoding="utf-8")
        assert load_config().max_revisions_per_file == 3


class TestSaveConfig:
    def test_save_value_writes_and_reloads(self) -> None:
        cfg = save_config_value("max_revisions_per_file", "20")
        assert cfg.max_revisions_per_file == 20
        data = yaml.safe_load(PROJECT_CONFIG_PATH.read_text(encoding="utf-8"))
        assert data == {"max_revisions_per_file": 20}

    def test_save_extensions(self) -> None:
        cfg = save_config_value("watch_extensions", ".md,txt")
        assert cfg.watch_extensions == (".md", ".txt")

    def test_invalid_value_is_not_written(self) -> None:
        with pytest.raises(ConfigError):
            save_config_value("max_revisions_per_file", "5000")
        assert not PROJECT_CONFIG_PATH.exists()

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            save_config_value("colour", "blue")
        assert exc_info.value.context["key"] == "colour"

    def test_save_default_config(self, tmp_path: Path) -> None:
        target = save_default_config(tmp_path / "cfg" / "config.yaml")
        data = yaml.safe_load(target.read_text(encoding="utf-8"))
        assert data["max_revisions_per_file"] == 50
        assert data["watch_extensions"] == []
        assert load_config(target) == RevisionsConfig()
