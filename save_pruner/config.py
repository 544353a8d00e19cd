"""Pruner configuration — a flat JSON file merged over built-in defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

_instance: "Config | None" = None

# Default config directory
_DEFAULT_CONFIG_DIR = Path.home() / ".save-pruner"

BACKENDS = ("cli", "rc")

# Settings that must stay non-negative / positive when set from the CLI
_MINIMUMS: dict[str, int] = {"keep_fulls": 1, "keep_diffs": 0, "diff_only_keep": 0, "timeout": 1}


def get_config(config_dir: Path | None = None) -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config(config_dir)
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """Settings for remote access and retention, stored as ``config.json``."""

    _DEFAULTS: dict[str, Any] = {
        # rclone remote holding one folder per game, e.g. "gdrive:ludusavi"
        "remote": "",
        "backend": "cli",
        "rclone_path": "rclone",
        "rc_url": "http://localhost:5572",
        "rc_user": "",
        "rc_pass": "",
        "timeout": 60,
        # Retention
        "keep_fulls": 1,
        "keep_diffs": 6,
        "diff_only_keep": 14,
        "log_dir": "",
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._dir = config_dir or _DEFAULT_CONFIG_DIR
        self._path = self._dir / "config.json"
        self._data: dict[str, Any] = dict(self._DEFAULTS)
        self._load()

    def _load(self) -> None:
        """Overlay known keys from disk; a broken file leaves the defaults in place."""
        if not self._path.exists():
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                user_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load config, using defaults: {e}")
            return
        if not isinstance(user_data, dict):
            logger.warning(f"Ignoring non-object config file: {self._path}")
            return
        for key, value in user_data.items():
            if key in self._DEFAULTS:
                self._data[key] = value
            else:
                logger.debug(f"Ignoring unknown config key: {key}")

    def _save(self) -> None:
        """Write through a temp file so a crash never leaves half a config behind."""
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self._path)
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            tmp_path.unlink(missing_ok=True)

    def set(self, key: str, value: Any) -> None:
        """Set and persist a known setting. Raises KeyError for unknown keys."""
        if key not in self._DEFAULTS:
            raise KeyError(key)
        self._data[key] = value
        self._save()

    def set_from_string(self, key: str, raw: str) -> Any:
        """Set a value given as text, coerced to the type of its default.

        Raises KeyError for unknown keys and ValueError for bad values.
        """
        if key not in self._DEFAULTS:
            raise KeyError(key)
        value: Any
        if isinstance(self._DEFAULTS[key], int):
            value = int(raw)
            if value < _MINIMUMS.get(key, value):
                raise ValueError(f"{key} must be at least {_MINIMUMS[key]}")
        else:
            value = raw
        if key == "backend" and value not in BACKENDS:
            raise ValueError(f"backend must be one of {', '.join(BACKENDS)}")
        self.set(key, value)
        return value

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # ── Typed properties ──

    @property
    def path(self) -> Path:
        return self._path

    @property
    def remote(self) -> str:
        return self._data["remote"]

    @remote.setter
    def remote(self, value: str) -> None:
        self.set("remote", value)

    @property
    def backend(self) -> str:
        return self._data["backend"]

    @property
    def rclone_path(self) -> str:
        return self._data["rclone_path"]

    @property
    def rc_url(self) -> str:
        return self._data["rc_url"]

    @property
    def rc_user(self) -> str:
        return self._data["rc_user"]

    @property
    def rc_pass(self) -> str:
        return self._data["rc_pass"]

    @property
    def timeout(self) -> float:
        return float(self._data["timeout"])

    @property
    def keep_fulls(self) -> int:
        return int(self._data["keep_fulls"])

    @keep_fulls.setter
    def keep_fulls(self, value: int) -> None:
        self.set("keep_fulls", value)

    @property
    def keep_diffs(self) -> int:
        return int(self._data["keep_diffs"])

    @property
    def diff_only_keep(self) -> int:
        return int(self._data["diff_only_keep"])

    @property
    def log_dir(self) -> Path | None:
        raw = self._data["log_dir"]
        return Path(raw) if raw else None
