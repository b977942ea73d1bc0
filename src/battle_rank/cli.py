#!/usr/bin/env python3
"""
Command-line interface for rebuilding battle rank statistics.

Usage:
    battle-rank rebuild                              # Fetch GitHub issues, rebuild all files
    battle-rank rebuild --input matches.json         # Rebuild from a local payload file
    battle-rank rebuild --output ./site/data --min-games 3
    battle-rank leaderboard --limit 20               # Print the persisted leaderboard
    battle-rank validate matches.json                # Report which payloads would be skipped
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .aggregators import normalize_payload
from .core.config import Settings, get_settings
from .export.writer import JsonDirectoryStore, PersistenceError, load_leaderboard
from .pipeline import run_rebuild
from .providers import RecordSourceError, RecordSourceProtocol, get_source

logger = logging.getLogger("battle_rank.cli")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _output_dir(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.output) if args.output else settings.output_dir


def _build_source(args: argparse.Namespace, settings: Settings) -> RecordSourceProtocol:
    if args.input:
        return get_source("json_file", path=args.input)
    return get_source(
        "github_issues",
        settings=settings,
        repo=args.repo,
        label=args.label,
    )


async def cmd_rebuild_async(
    args: argparse.Namespace,
    settings: Settings,
    source: RecordSourceProtocol,
) -> int:
    """Rebuild every output file from the full record set."""
    output_dir = _output_dir(args, settings)
    min_games = args.min_games if args.min_games is not None else settings.leaderboard_min_games

    try:
        result = await run_rebuild(source, JsonDirectoryStore(output_dir), min_games=min_games)
    except RecordSourceError as e:
        logger.error("Record retrieval failed, nothing written: %s", e)
        return 1
    except PersistenceError as e:
        logger.error("Failed to write output: %s", e)
        return 1

    print("\nRebuild complete")
    print("=" * 50)
    print(f"Output: {output_dir}")
    print(f"Payloads: {result.payloads}")
    print(f"Records admitted: {result.records}")
    print(f"Records skipped: {result.skipped_total}")
    for reason, count in sorted(result.skipped.items()):
        print(f"  {reason}: {count}")
    print(f"Players: {len(result.tables.players)}")
    print(f"Races: {len(result.tables.factions)}")
    print(f"Regions: {len(result.tables.regions)}")
    print(f"Files written: {result.documents_written}")
    return 0


def cmd_rebuild(args: argparse.Namespace, settings: Settings) -> int:
    try:
        source = _build_source(args, settings)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    return asyncio.run(cmd_rebuild_async(args, settings, source))


def cmd_leaderboard(args: argparse.Namespace, settings: Settings) -> int:
    """Print the persisted leaderboard."""
    output_dir = _output_dir(args, settings)
    try:
        document = load_leaderboard(output_dir)
    except PersistenceError as e:
        logger.error("%s", e)
        return 1

    rows = document.get("players", [])
    if args.limit:
        rows = rows[: args.limit]

    print(f"\nLeaderboard (updated {document.get('updatedAt', 'unknown')})")
    print("=" * 60)
    for rank, row in enumerate(rows, start=1):
        print(
            f"{rank:3}. {row['player']:<25} {row['winRate']:.3f}  "
            f"({row['wins']}-{row['losses']}, {row['total']} games)"
        )
    return 0


def cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    """Normalize a local payload file without writing anything."""
    try:
        payloads = get_source("json_file", path=args.file).load()
    except RecordSourceError as e:
        logger.error("%s", e)
        return 1

    admitted = 0
    for payload in payloads:
        result = normalize_payload(payload)
        if result.ok:
            admitted += 1
        else:
            print(f"  skip {payload.id}: {result.reason} {result.detail}".rstrip())

    print(f"\n{admitted} of {len(payloads)} payloads admitted, {len(payloads) - admitted} skipped")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="battle-rank",
        description="Battle rank statistics builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # rebuild command
    rebuild_parser = subparsers.add_parser("rebuild", help="Rebuild all statistics files")
    rebuild_parser.add_argument("--input", help="Read payloads from a local JSON file instead of GitHub")
    rebuild_parser.add_argument("--output", help="Output directory")
    rebuild_parser.add_argument("--repo", help="GitHub repository (owner/name)")
    rebuild_parser.add_argument("--label", help="Only use issues with this label")
    rebuild_parser.add_argument("--min-games", type=int, help="Minimum games to appear on the leaderboard")

    # leaderboard command
    lb_parser = subparsers.add_parser("leaderboard", help="Print the persisted leaderboard")
    lb_parser.add_argument("--output", help="Output directory")
    lb_parser.add_argument("--limit", type=int, help="Number of rows to show")

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Check payloads in a local JSON file")
    validate_parser.add_argument("file", help="JSON file of payloads")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    commands = {
        "rebuild": cmd_rebuild,
        "leaderboard": cmd_leaderboard,
        "validate": cmd_validate,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args, settings)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
