"""Application context — wires config, remote backend and pruner together."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from save_pruner.config import BACKENDS
from save_pruner.core.pruner import BackupPruner, RetentionSettings
from save_pruner.remote.rclone_cli import RcloneCli
from save_pruner.remote.rclone_rc import RcloneRc

if TYPE_CHECKING:
    from save_pruner.config import Config
    from save_pruner.remote.base import RemoteStorage


@dataclass
class AppContext:
    """Central service container for one CLI invocation."""

    config: Config
    remote: RemoteStorage
    pruner: BackupPruner


def create_remote(config: Config, remote: str, backend: str) -> RemoteStorage:
    """Instantiate the storage backend. Raises ValueError for unknown backends."""
    if backend == "cli":
        return RcloneCli(remote, rclone_path=config.rclone_path, timeout=config.timeout)
    if backend == "rc":
        return RcloneRc(
            remote,
            url=config.rc_url,
            user=config.rc_user,
            password=config.rc_pass,
            timeout=config.timeout,
        )
    raise ValueError(f"Unknown backend: {backend!r} (expected one of {', '.join(BACKENDS)})")


def create_context(
    config: Config,
    remote: str | None = None,
    backend: str | None = None,
    settings: RetentionSettings | None = None,
) -> AppContext:
    """Wire services; explicit arguments override config values."""
    storage = create_remote(config, remote or config.remote, backend or config.backend)
    settings = settings or RetentionSettings(
        keep_fulls=config.keep_fulls,
        keep_diffs=config.keep_diffs,
        diff_only_keep=config.diff_only_keep,
    )
    return AppContext(config=config, remote=storage, pruner=BackupPruner(storage, settings))
