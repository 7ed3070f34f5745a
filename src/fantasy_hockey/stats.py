from __future__ import annotations

import logging
import re
import unicodedata
from typing import Iterable, Iterator

from .config import KNOWN_HEAD_TO_HEAD_CORRECTIONS
from .models import (
    HeadToHeadTable,
    ManagerStats,
    PlayoffResults,
    SeasonRecord,
    WinLossRecord,
)
from .parser import parse_matchup

logger = logging.getLogger(__name__)

RECORD_WITH_TIES_RE = re.compile(r"(\d+)-(\d+)-(\d+)")
RECORD_RE = re.compile(r"(\d+)-(\d+)")


def parse_record(text: str | None) -> WinLossRecord | None:
    """Parse ``W-L-T`` (tried first) or ``W-L`` text; anything else is ``None``."""
    if not text:
        return None
    match = RECORD_WITH_TIES_RE.search(text)
    if match:
        return WinLossRecord(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    match = RECORD_RE.search(text)
    if match:
        return WinLossRecord(int(match.group(1)), int(match.group(2)), 0)
    return None


def manager_sort_key(name: str) -> tuple[str, str, str]:
    """Collation key close to a locale compare.

    Accents are ignored first and only break ties afterwards. Names that differ
    only in case put the lowercase spelling first.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name.casefold(), name.swapcase())


def played_seasons(seasons: Iterable[SeasonRecord]) -> list[SeasonRecord]:
    """Seasons that actually happened (at least one manager row)."""
    return [season for season in seasons if season.managers]


def known_managers(seasons: Iterable[SeasonRecord]) -> set[str]:
    return {entry.manager for season in seasons for entry in season.managers}


def calculate_manager_stats(seasons: Iterable[SeasonRecord]) -> list[ManagerStats]:
    played = played_seasons(seasons)
    by_manager: dict[str, ManagerStats] = {}
    finish_totals: dict[str, int] = {}

    for season in played:
        for entry in season.managers:
            stats = by_manager.get(entry.manager)
            if stats is None:
                stats = ManagerStats(manager=entry.manager)
                by_manager[entry.manager] = stats
                finish_totals[entry.manager] = 0

            stats.total_seasons += 1
            stats.seasons_played.append(season.year)
            finish_totals[entry.manager] += entry.final_position

            if entry.is_champion:
                stats.championships += 1
            elif entry.final_position == 2:
                stats.runner_ups += 1

            regular = parse_record(entry.regular_season_record)
            if regular is not None:
                stats.regular_season_record.add(regular)

            if entry.made_playoffs:
                stats.playoff_appearances += 1
                playoff = parse_record(entry.playoff_record)
                if playoff is not None:
                    stats.playoff_record.wins += playoff.wins
                    stats.playoff_record.losses += playoff.losses

    # total_seasons is only final once every season has been folded in.
    for name, stats in by_manager.items():
        stats.seasons_played.sort()
        stats.average_finish = finish_totals[name] / stats.total_seasons

    return sorted(by_manager.values(), key=lambda stats: manager_sort_key(stats.manager))


def playoff_matchups(
    results: PlayoffResults | None,
    include_fifth_place: bool = True,
    include_third_place: bool = False,
) -> list[str]:
    """Bracket matchups that count as real playoff meetings, in round order.

    7th and 9th place games are never included. The 3rd place game is a
    consolation round too and is only added for the rivalry network view.
    """
    if results is None:
        return []
    matchups: list[str] = [*(results.quarterfinals or []), *(results.semifinals or [])]
    if results.finals:
        matchups.append(results.finals)
    if include_third_place and results.third_place:
        matchups.append(results.third_place)
    if include_fifth_place and results.fifth_place:
        matchups.append(results.fifth_place)
    return matchups


def manager_pairings(
    seasons: Iterable[SeasonRecord],
    include_fifth_place: bool = True,
    include_third_place: bool = False,
) -> Iterator[tuple[int, str, str]]:
    """Yield ``(year, winner, loser)`` for bracket games between two managers.

    Bracket names that are not managers of the league (team names, typos) are
    skipped, and so is a manager listed against themselves.
    """
    played = played_seasons(seasons)
    known = known_managers(played)
    for season in played:
        matchups = playoff_matchups(
            season.playoff_results,
            include_fifth_place=include_fifth_place,
            include_third_place=include_third_place,
        )
        for matchup in matchups:
            parsed = parse_matchup(matchup)
            if parsed is None:
                logger.debug("%s playoffs: ignoring matchup %r", season.year, matchup)
                continue
            winner, loser = parsed
            if winner == loser or winner not in known or loser not in known:
                logger.debug("%s playoffs: %r is not a game between two managers", season.year, matchup)
                continue
            yield season.year, winner, loser


def compute_head_to_head(
    seasons: Iterable[SeasonRecord],
    include_fifth_place: bool = True,
    apply_corrections: bool = True,
) -> HeadToHeadTable:
    played = played_seasons(seasons)
    table = HeadToHeadTable()
    for year, winner, loser in manager_pairings(played, include_fifth_place=include_fifth_place):
        record = table.get_or_create(winner, loser)
        record.register_win(winner, f"{year} Playoffs: {winner} def. {loser}")

    if apply_corrections:
        apply_known_corrections(table, known_managers(played))
    return table


def apply_known_corrections(table: HeadToHeadTable, managers: Iterable[str]) -> HeadToHeadTable:
    """Patch playoff meetings the bracket text does not capture.

    A correction is applied only when both managers appear somewhere in the
    league history. Win counts never drop below zero.
    """
    known = set(managers)
    for correction in KNOWN_HEAD_TO_HEAD_CORRECTIONS:
        first, second = correction.managers
        if first not in known or second not in known:
            continue
        record = table.get_or_create(first, second)
        record.playoff_meetings += correction.meetings
        for manager, delta in correction.win_deltas:
            if manager == record.manager1:
                record.manager1_wins = max(0, record.manager1_wins + delta)
            elif manager == record.manager2:
                record.manager2_wins = max(0, record.manager2_wins + delta)
        record.matchups.append(correction.log)
        logger.debug("Applied head-to-head correction for %s vs %s", first, second)
    return table
