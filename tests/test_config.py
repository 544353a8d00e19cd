"""Tests for the Config system."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from save_pruner.config import Config, get_config, reset_config


@pytest.fixture(autouse=True)
def _clean_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(config_dir=tmp_path)


class TestConfig:
    def test_default_values(self, config: Config) -> None:
        assert config.keep_fulls == 1
        assert config.keep_diffs == 6
        assert config.diff_only_keep == 14
        assert config.backend == "cli"
        assert config.log_dir is None

    def test_defaults_not_written_until_set(self, config: Config) -> None:
        assert not config.path.exists()

    def test_set_persists(self, tmp_path: Path, config: Config) -> None:
        config.remote = "gdrive:ludusavi"
        assert Config(config_dir=tmp_path).remote == "gdrive:ludusavi"

    def test_set_from_string_coerces(self, config: Config) -> None:
        assert config.set_from_string("keep_diffs", "4") == 4
        assert config.keep_diffs == 4
        assert config.set_from_string("rc_url", "http://nas:5572") == "http://nas:5572"

    def test_set_from_string_rejects(self, config: Config) -> None:
        with pytest.raises(KeyError):
            config.set_from_string("nope", "1")
        with pytest.raises(ValueError):
            config.set_from_string("keep_fulls", "many")

    def test_set_from_string_rejects_unknown_backend(self, config: Config) -> None:
        with pytest.raises(ValueError, match="backend"):
            config.set_from_string("backend", "ftp")
        assert config.backend == "cli"
        assert config.set_from_string("backend", "rc") == "rc"

    def test_set_from_string_enforces_minimums(self, config: Config) -> None:
        with pytest.raises(ValueError):
            config.set_from_string("keep_fulls", "0")
        with pytest.raises(ValueError):
            config.set_from_string("keep_diffs", "-1")
        assert config.set_from_string("keep_diffs", "0") == 0

    def test_unknown_keys_in_file_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text(
            json.dumps({"keep_diffs": 2, "language": "en_US"}), encoding="utf-8"
        )
        loaded = Config(config_dir=tmp_path)
        assert loaded.keep_diffs == 2
        assert "language" not in loaded.as_dict()

    def test_corrupt_file_falls_back(self, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text("{broken", encoding="utf-8")
        assert Config(config_dir=tmp_path).keep_fulls == 1

    def test_get_config_singleton(self, tmp_path: Path) -> None:
        assert get_config(tmp_path) is get_config()
