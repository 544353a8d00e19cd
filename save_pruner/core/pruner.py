"""Pruner — lists game folders on the remote, plans retention and deletes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from save_pruner.core.retention import plan_folder
from save_pruner.models.backup_file import BackupFile, RetentionPlan, backup_from_entry
from save_pruner.remote.base import RemoteError, join_path

if TYPE_CHECKING:
    from save_pruner.remote.base import RemoteStorage


@dataclass
class RetentionSettings:
    """Retention limits for one run."""

    keep_fulls: int = 1
    keep_diffs: int = 6
    diff_only_keep: int = 14


@dataclass
class FolderResult:
    """Outcome for a single game folder."""

    folder: str
    plan: RetentionPlan = field(default_factory=RetentionPlan)
    deleted: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class PruneResult:
    """Result of a prune run over one or more folders."""

    dry_run: bool = False
    folders: list[FolderResult] = field(default_factory=list)

    @property
    def planned_deletions(self) -> int:
        return sum(len(f.plan.delete) for f in self.folders)

    @property
    def deleted(self) -> int:
        return sum(len(f.deleted) for f in self.folders)

    @property
    def kept(self) -> int:
        return sum(len(f.plan.keep) for f in self.folders)

    @property
    def reclaimable_bytes(self) -> int:
        return sum(f.plan.reclaimed_bytes for f in self.folders)

    @property
    def errors(self) -> list[str]:
        return [e for f in self.folders for e in f.errors]


class BackupPruner:
    """
    Applies the full/differential retention policy to every game folder.

    Remote layout:
      {remote}/{game}/
        ├── backup-20240101120000Z.zip
        ├── backup-20240102120000Z-diff.zip
        └── ...
    """

    def __init__(self, remote: RemoteStorage, settings: RetentionSettings) -> None:
        self._remote = remote
        self._settings = settings

    def list_folders(self) -> list[str]:
        """Game folders under the remote root. Raises RemoteError."""
        return sorted(e.name for e in self._remote.list("") if e.is_dir)

    def list_backup_files(self, folder: str) -> list[BackupFile]:
        """Recognised backup archives in *folder*. Raises RemoteError."""
        files: list[BackupFile] = []
        for entry in self._remote.list(folder):
            backup = backup_from_entry(entry)
            if backup is None:
                if not entry.is_dir:
                    logger.debug(f"Skipping non-backup file: {folder}/{entry.name}")
                continue
            files.append(backup)
        return files

    def plan_folder(self, folder: str) -> RetentionPlan:
        s = self._settings
        return plan_folder(self.list_backup_files(folder), s.keep_fulls, s.keep_diffs, s.diff_only_keep)

    def prune_folder(self, folder: str, dry_run: bool = False) -> FolderResult:
        """Plan one folder and, unless *dry_run*, delete what the plan rejects."""
        result = FolderResult(folder=folder)
        try:
            result.plan = self.plan_folder(folder)
        except RemoteError as e:
            logger.error(f"Failed to list {folder}: {e}")
            result.errors.append(f"{folder}: {e}")
            return result

        logger.info(
            f"{folder}: keep {len(result.plan.keep)}, delete {len(result.plan.delete)}"
        )
        if dry_run:
            return result

        for backup in result.plan.delete:
            path = join_path(folder, backup.name)
            try:
                self._remote.delete(path)
                result.deleted.append(backup.name)
                logger.debug(f"Deleted {path}")
            except RemoteError as e:
                logger.warning(f"Failed to delete {path}: {e}")
                result.errors.append(f"{path}: {e}")
        return result

    def run(self, folders: list[str] | None = None, dry_run: bool = False) -> PruneResult:
        """Prune the given folders (default: every folder under the root).

        Listing the root raises RemoteError; per-folder and per-file failures
        are recorded on the result instead.
        """
        targets = folders if folders else self.list_folders()
        result = PruneResult(dry_run=dry_run)
        total = len(targets)
        for i, folder in enumerate(targets, start=1):
            logger.info(f"[{i}/{total}] {folder}")
            result.folders.append(self.prune_folder(folder, dry_run=dry_run))
        return result
