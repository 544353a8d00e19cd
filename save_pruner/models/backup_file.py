"""Backup archive models and filename parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum

# backup-20240131235959Z.zip / backup-20240131235959Z-diff.zip
_BACKUP_NAME_RE = re.compile(r"^backup-(\d{14})Z(-diff)?\.zip$")

# rclone emits RFC3339 with up to nanosecond precision
_MOD_TIME_RE = re.compile(r"^(.*T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})?$")


class BackupKind(StrEnum):
    """Kind of backup archive."""

    FULL = "full"
    DIFF = "diff"


@dataclass
class RemoteEntry:
    """One row of a remote directory listing."""

    name: str
    is_dir: bool
    mod_time: datetime
    size: int = 0


@dataclass
class BackupFile:
    """A recognised backup archive inside one game folder."""

    name: str
    mod_time: datetime
    kind: BackupKind
    stamp: datetime  # UTC time encoded in the file name
    size: int = 0

    @property
    def is_full(self) -> bool:
        return self.kind == BackupKind.FULL


@dataclass
class RetentionPlan:
    """Partition of one folder's backups into files to keep and to delete."""

    keep: list[BackupFile] = field(default_factory=list)
    delete: list[BackupFile] = field(default_factory=list)

    @property
    def keep_names(self) -> list[str]:
        return [f.name for f in self.keep]

    @property
    def delete_names(self) -> list[str]:
        return [f.name for f in self.delete]

    @property
    def reclaimed_bytes(self) -> int:
        return sum(f.size for f in self.delete)


def parse_backup_name(name: str) -> tuple[BackupKind, datetime] | None:
    """Return ``(kind, stamp)`` for a backup archive name, or None if it is not one."""
    m = _BACKUP_NAME_RE.match(name)
    if not m:
        return None
    try:
        stamp = datetime.strptime(m.group(1), "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        # 14 digits that are not a real date (e.g. month 13)
        return None
    kind = BackupKind.DIFF if m.group(2) else BackupKind.FULL
    return kind, stamp


def backup_from_entry(entry: RemoteEntry) -> BackupFile | None:
    """Build a BackupFile from a listing row; directories and foreign files yield None."""
    if entry.is_dir:
        return None
    parsed = parse_backup_name(entry.name)
    if parsed is None:
        return None
    kind, stamp = parsed
    return BackupFile(
        name=entry.name,
        mod_time=entry.mod_time,
        kind=kind,
        stamp=stamp,
        size=entry.size,
    )


def parse_mod_time(raw: str) -> datetime:
    """Parse an rclone ModTime string into an aware datetime.

    Fractions beyond microseconds are truncated; a missing offset is taken as UTC.
    Raises ValueError on malformed input.
    """
    m = _MOD_TIME_RE.match(raw.strip())
    if not m:
        raise ValueError(f"Unrecognised modification time: {raw!r}")
    base, frac, offset = m.groups()
    text = base
    if frac:
        text += "." + frac[:6].ljust(6, "0")
    if offset and offset != "Z":
        text += offset
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
