"""Prune full/differential game-save backup archives on an rclone remote.

Usage:
    python main.py prune [--remote REMOTE] [--game NAME ...] [--keep-fulls N]
                         [--keep-diffs N] [--backend cli|rc] [--dry-run] [-v]
    python main.py config show
    python main.py config set <key> <value>

Examples:
    python main.py prune --remote gdrive:ludusavi --dry-run -v
    python main.py prune --game "Hollow Knight" --keep-fulls 2 --keep-diffs 3
    python main.py config set remote gdrive:ludusavi
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from loguru import logger

from save_pruner.config import Config, get_config
from save_pruner.context import BACKENDS, create_context
from save_pruner.core.pruner import RetentionSettings
from save_pruner.core.report import format_report
from save_pruner.logger import setup_logger
from save_pruner.remote.base import RemoteError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="save-pruner",
        description="Prune full/differential game-save backups on an rclone remote.",
    )
    parser.add_argument("--config-dir", type=Path, help="Directory holding config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    prune = sub.add_parser("prune", help="Plan and delete old backups")
    prune.add_argument("--remote", help="rclone remote root, e.g. gdrive:ludusavi")
    prune.add_argument(
        "--game",
        action="append",
        dest="games",
        metavar="NAME",
        help="Only prune this game folder (repeatable)",
    )
    prune.add_argument("--keep-fulls", type=int, help="Full backups to keep per game")
    prune.add_argument("--keep-diffs", type=int, help="Differential backups to keep per full")
    prune.add_argument("--backend", choices=BACKENDS, help="rclone binary (cli) or rcd API (rc)")
    prune.add_argument("--dry-run", action="store_true", help="Report only, delete nothing")
    prune.add_argument("-v", "--verbose", action="store_true", help="List every file and log debug output")

    cfg = sub.add_parser("config", help="Show or change settings")
    cfg_sub = cfg.add_subparsers(dest="action", required=True)
    cfg_sub.add_parser("show", help="Print the effective configuration")
    cfg_set = cfg_sub.add_parser("set", help="Persist a setting")
    cfg_set.add_argument("key")
    cfg_set.add_argument("value")
    return parser


def _settings(args: argparse.Namespace, config: Config) -> RetentionSettings:
    keep_fulls = config.keep_fulls if args.keep_fulls is None else args.keep_fulls
    keep_diffs = config.keep_diffs if args.keep_diffs is None else args.keep_diffs
    return RetentionSettings(
        keep_fulls=keep_fulls,
        keep_diffs=keep_diffs,
        diff_only_keep=config.diff_only_keep,
    )


def run_prune(args: argparse.Namespace, config: Config, parser: argparse.ArgumentParser) -> int:
    settings = _settings(args, config)
    if settings.keep_fulls < 1:
        parser.error("keep-fulls must be at least 1")
    if settings.keep_diffs < 0:
        parser.error("keep-diffs must not be negative")
    remote = args.remote or config.remote
    if not remote:
        parser.error("no remote configured (use --remote or 'config set remote ...')")

    try:
        ctx = create_context(config, remote=remote, backend=args.backend, settings=settings)
    except ValueError as e:
        parser.error(str(e))

    logger.info(
        f"Pruning {remote} via {ctx.remote.name} "
        f"(keep {settings.keep_fulls} full, {settings.keep_diffs} diff per full)"
        + (" [dry run]" if args.dry_run else "")
    )
    with ctx.remote:
        try:
            result = ctx.pruner.run(args.games, dry_run=args.dry_run)
        except RemoteError as e:
            logger.error(f"Could not list {remote}: {e}")
            return 1

    print(format_report(result, verbose=args.verbose))
    return 1 if result.errors else 0


def run_config(args: argparse.Namespace, config: Config, parser: argparse.ArgumentParser) -> int:
    if args.action == "show":
        print(f"# {config.path}")
        print(json.dumps(config.as_dict(), ensure_ascii=False, indent=2))
        return 0

    try:
        value = config.set_from_string(args.key, args.value)
    except KeyError:
        parser.error(f"unknown setting: {args.key}")
    except ValueError:
        parser.error(f"invalid value for {args.key}: {args.value}")
    print(f"{args.key} = {value!r}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config(args.config_dir)
    setup_logger(config.log_dir, verbose=getattr(args, "verbose", False))

    if args.command == "config":
        return run_config(args, config, parser)
    return run_prune(args, config, parser)


if __name__ == "__main__":
    sys.exit(main())
