"""rclone command-line backend — shells out to ``rclone lsjson`` / ``rclone deletefile``."""

from __future__ import annotations

import json
import subprocess
from typing import Any

from loguru import logger

from save_pruner.models.backup_file import RemoteEntry, parse_mod_time
from save_pruner.remote.base import RemoteError, RemoteStorage, join_path


def entries_from_lsjson(items: list[dict[str, Any]]) -> list[RemoteEntry]:
    """Convert rclone's lsjson / operations/list items into RemoteEntry rows."""
    entries: list[RemoteEntry] = []
    for item in items:
        try:
            entries.append(
                RemoteEntry(
                    name=item["Name"],
                    is_dir=bool(item.get("IsDir", False)),
                    mod_time=parse_mod_time(item["ModTime"]),
                    size=max(int(item.get("Size", 0)), 0),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteError(f"Malformed listing entry {item!r}: {e}") from e
    return entries


class RcloneCli(RemoteStorage):
    """Runs the rclone binary against ``<remote>/<path>``."""

    def __init__(self, remote: str, rclone_path: str = "rclone", timeout: float = 60) -> None:
        self._remote = remote.rstrip("/")
        self._rclone = rclone_path
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "cli"

    def _target(self, path: str) -> str:
        sub = join_path(path)
        if not sub:
            return self._remote
        sep = "" if self._remote.endswith(":") else "/"
        return f"{self._remote}{sep}{sub}"

    def _run(self, *args: str) -> str:
        cmd = [self._rclone, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise RemoteError(f"rclone executable not found: {self._rclone}") from e
        except subprocess.TimeoutExpired as e:
            raise RemoteError(f"rclone timed out after {self._timeout}s: {' '.join(args)}") from e
        except OSError as e:
            raise RemoteError(f"Could not run {self._rclone}: {e}") from e
        if proc.returncode != 0:
            detail = (proc.stderr or "").strip() or f"exit code {proc.returncode}"
            raise RemoteError(f"rclone {args[0]} failed: {detail}")
        return proc.stdout

    def list(self, path: str) -> list[RemoteEntry]:
        out = self._run("lsjson", self._target(path))
        try:
            items = json.loads(out or "[]")
        except json.JSONDecodeError as e:
            raise RemoteError(f"Invalid lsjson output for {self._target(path)}: {e}") from e
        if not isinstance(items, list):
            raise RemoteError(f"Unexpected lsjson output for {self._target(path)}")
        return entries_from_lsjson(items)

    def delete(self, path: str) -> None:
        self._run("deletefile", self._target(path))
