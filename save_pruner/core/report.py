"""Plain-text summary of a prune run."""

from __future__ import annotations

from save_pruner.core.pruner import PruneResult
from save_pruner.utils import format_size


def format_report(result: PruneResult, verbose: bool = False) -> str:
    lines: list[str] = []
    for folder in result.folders:
        plan = folder.plan
        lines.append(f"{folder.folder}: keep {len(plan.keep)}, delete {len(plan.delete)}")
        if verbose:
            lines.extend(f"  KEEP   {name}" for name in plan.keep_names)
            lines.extend(f"  DELETE {name}" for name in plan.delete_names)
        lines.extend(f"  ERROR  {err}" for err in folder.errors)

    size = format_size(result.reclaimable_bytes)
    if result.dry_run:
        lines.append(
            f"Dry run: {result.planned_deletions} file(s) would be deleted ({size}), "
            f"{result.kept} kept, in {len(result.folders)} folder(s)"
        )
    else:
        lines.append(
            f"Deleted {result.deleted} of {result.planned_deletions} file(s) ({size} planned), "
            f"{result.kept} kept, in {len(result.folders)} folder(s)"
        )
    if result.errors:
        lines.append(f"{len(result.errors)} error(s)")
    return "\n".join(lines)
