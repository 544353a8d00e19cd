"""Retention planner — decides which full/differential backups to keep.

Differential archives are only restorable together with the full backup they
were taken against, so diffs are trimmed per window of the full that precedes
them and everything older than the oldest kept full goes away.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from save_pruner.models.backup_file import BackupFile, RetentionPlan

# How many diffs survive in a folder that has no full backup at all
DIFF_ONLY_KEEP = 14


def _by_mod_time(files: Iterable[BackupFile]) -> list[BackupFile]:
    # sorted() is stable, so equal times keep input order
    return sorted(files, key=lambda f: f.mod_time)


def _split_newest(files: list[BackupFile], count: int) -> tuple[list[BackupFile], list[BackupFile]]:
    """Split an ascending list into ``(older, newest count)``."""
    if count <= 0:
        return list(files), []
    return files[:-count], files[-count:]


def _unique(files: Iterable[BackupFile], exclude: set[str] | None = None) -> list[BackupFile]:
    seen: set[str] = set(exclude or ())
    out: list[BackupFile] = []
    for f in files:
        if f.name in seen:
            continue
        seen.add(f.name)
        out.append(f)
    return out


def plan(
    fulls: Sequence[BackupFile],
    diffs: Sequence[BackupFile],
    keep_fulls: int,
    keep_diffs: int,
    diff_only_keep: int = DIFF_ONLY_KEEP,
) -> RetentionPlan:
    """Partition one folder's backups into keep / delete.

    ``keep_fulls`` newest fulls survive. Diffs older than the oldest kept full
    are dropped; the rest are grouped into windows ``[full_i, full_i+1)`` and
    only the newest ``keep_diffs`` of each window survive. A folder without any
    full keeps its newest ``diff_only_keep`` diffs.
    """
    if not fulls:
        older, newest = _split_newest(_by_mod_time(diffs), diff_only_keep)
        keep = _unique(newest)
        return RetentionPlan(keep=keep, delete=_unique(older, {f.name for f in keep}))

    deleted_fulls, kept_fulls = _split_newest(_by_mod_time(fulls), keep_fulls)
    sorted_diffs = _by_mod_time(diffs)

    if not kept_fulls:
        return RetentionPlan(keep=[], delete=_unique(deleted_fulls + sorted_diffs))

    oldest_kept = kept_fulls[0].mod_time
    deleted_diffs = [d for d in sorted_diffs if d.mod_time < oldest_kept]
    kept_diffs: list[BackupFile] = []

    for i, full in enumerate(kept_fulls):
        upper = kept_fulls[i + 1].mod_time if i + 1 < len(kept_fulls) else None
        window = [
            d
            for d in sorted_diffs
            if d.mod_time >= full.mod_time and (upper is None or d.mod_time < upper)
        ]
        older, newest = _split_newest(window, keep_diffs)
        deleted_diffs.extend(older)
        kept_diffs.extend(newest)

    keep = _unique(kept_fulls + kept_diffs)
    delete = _unique(deleted_fulls + deleted_diffs, {f.name for f in keep})
    return RetentionPlan(keep=keep, delete=delete)


def plan_folder(
    files: Iterable[BackupFile],
    keep_fulls: int,
    keep_diffs: int,
    diff_only_keep: int = DIFF_ONLY_KEEP,
) -> RetentionPlan:
    """Split a mixed folder listing by kind and plan it."""
    files = list(files)
    fulls = [f for f in files if f.is_full]
    diffs = [f for f in files if not f.is_full]
    return plan(fulls, diffs, keep_fulls, keep_diffs, diff_only_keep)
