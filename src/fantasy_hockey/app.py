from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .config import DEFAULT_SNAPSHOT_PATH
from .errors import FantasyHockeyError
from .models import ManagerStats
from .snapshot import LeagueSnapshot, generate_snapshot

logger = logging.getLogger(__name__)


def format_manager_stats(stats: Iterable[ManagerStats], limit: int | None = None) -> str:
    lines = ["Manager              Seasons Titles RU  PO  AvgFin  Regular    Playoff"]
    rows = list(stats)
    for row in rows[:limit] if limit is not None else rows:
        playoff = f"{row.playoff_record.wins}-{row.playoff_record.losses}"
        lines.append(
            f"{row.manager:<20} {row.total_seasons:>7} {row.championships:>6} {row.runner_ups:>3}"
            f" {row.playoff_appearances:>3} {row.average_finish:>7.2f}  {str(row.regular_season_record):<10} {playoff}"
        )
    return "\n".join(lines)


def format_summary(snapshot: LeagueSnapshot, top: int = 3) -> str:
    lines = [
        "Data Summary:",
        f"- Total seasons: {len(snapshot.seasons)}",
        f"- Total managers: {len(snapshot.manager_stats)}",
        f"- Year range: {snapshot.metadata.get('yearRange', '')}",
        "",
        "Top Champions:",
    ]
    leaders = sorted(snapshot.manager_stats, key=lambda row: -row.championships)[:top]
    for idx, row in enumerate(leaders, start=1):
        lines.append(f"{idx}. {row.manager}: {row.championships} championship(s)")
    return "\n".join(lines)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fantasy-hockey-generate",
        description="Parse the league history document and write the stats snapshot.",
    )
    parser.add_argument("source", help="Markdown league history document")
    parser.add_argument(
        "-o",
        "--output",
        default=str(DEFAULT_SNAPSHOT_PATH),
        help=f"snapshot JSON path (default: {DEFAULT_SNAPSHOT_PATH})",
    )
    parser.add_argument("--stats", action="store_true", help="print the full manager table")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger.info("Parsing %s", args.source)
    try:
        snapshot = generate_snapshot(args.source, args.output)
    except FantasyHockeyError as exc:
        logger.error("Snapshot generation failed: %s", exc)
        return 1

    print(format_summary(snapshot))
    if args.stats:
        print()
        print(format_manager_stats(snapshot.manager_stats))
    return 0


if __name__ == "__main__":
    sys.exit(main())
