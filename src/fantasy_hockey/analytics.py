from __future__ import annotations

from typing import Any, Iterable

from .config import AVERAGE_FINISH_EXCLUDED_MANAGERS, CHAMPIONSHIP_NOTES, ERAS
from .models import HeadToHeadTable, ManagerStats, SeasonRecord
from .stats import RECORD_WITH_TIES_RE, manager_pairings, manager_sort_key, played_seasons


def championship_timeline(seasons: Iterable[SeasonRecord]) -> list[dict[str, Any]]:
    timeline: list[dict[str, Any]] = []
    for season in played_seasons(seasons):
        champion = season.champion
        if champion is None:
            continue
        timeline.append(
            {
                "year": season.year,
                "champion": champion.manager,
                "team": champion.team,
                "regularSeasonRecord": champion.regular_season_record,
                "playoffRecord": champion.playoff_record,
                "isDynasty": False,
                "note": CHAMPIONSHIP_NOTES.get(season.year),
            }
        )

    # Three or more titles in a row by the same manager is a dynasty.
    for idx in range(len(timeline) - 2):
        window = timeline[idx:idx + 3]
        if len({item["champion"] for item in window}) == 1:
            for item in window:
                item["isDynasty"] = True
    return timeline


def championship_droughts(
    seasons: Iterable[SeasonRecord],
    current_year: int | None = None,
) -> list[dict[str, Any]]:
    """Title droughts for every manager in the most recent season."""
    played = played_seasons(seasons)
    if not played:
        return []
    latest = max(played, key=lambda season: season.year)
    first_year = min(season.year for season in played)
    year_now = current_year if current_year is not None else latest.year

    title_years: dict[str, list[int]] = {}
    for item in championship_timeline(played):
        title_years.setdefault(item["champion"], []).append(item["year"])

    droughts: list[dict[str, Any]] = []
    for entry in latest.managers:
        years = sorted(title_years.get(entry.manager, []))
        last_title = years[-1] if years else None
        current = year_now - last_title if last_title is not None else year_now - first_year
        longest = 0
        for prev, nxt in zip(years, years[1:]):
            longest = max(longest, nxt - prev - 1)
        droughts.append(
            {
                "manager": entry.manager,
                "currentDrought": current,
                "longestDrought": max(longest, current),
                "totalChampionships": len(years),
                "lastChampionship": last_title,
                "isActive": bool(years),
            }
        )
    droughts.sort(key=lambda row: (-row["totalChampionships"], -row["currentDrought"]))
    return droughts


def era_summaries(
    seasons: Iterable[SeasonRecord],
    eras: Iterable[tuple[str, Iterable[int]]] = ERAS,
) -> list[dict[str, Any]]:
    played = played_seasons(seasons)
    summaries: list[dict[str, Any]] = []
    for name, years in eras:
        era_years = set(years)
        era_seasons = [season for season in played if season.year in era_years]
        counts: dict[str, int] = {}
        for season in era_seasons:
            champion = season.champion
            if champion is not None:
                counts[champion.manager] = counts.get(champion.manager, 0) + 1
        ranked = sorted(counts.items(), key=lambda item: (-item[1], manager_sort_key(item[0])))
        summaries.append(
            {
                "name": name,
                "seasons": len(era_seasons),
                "dominantManager": ranked[0][0] if ranked else "None",
                "championships": ranked[0][1] if ranked else 0,
                "allChampions": len(counts),
            }
        )
    return summaries


def _regular_season_rows(seasons: Iterable[SeasonRecord], champions_only: bool = False) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for season in played_seasons(seasons):
        for entry in season.managers:
            if champions_only and not entry.is_champion:
                continue
            if not entry.regular_season_record or entry.regular_season_record == "-":
                continue
            match = RECORD_WITH_TIES_RE.search(entry.regular_season_record)
            if not match:
                continue
            wins, losses = int(match.group(1)), int(match.group(2))
            if wins + losses == 0:
                continue
            rows.append(
                {
                    "year": season.year,
                    "manager": entry.manager,
                    "record": entry.regular_season_record,
                    "position": entry.regular_season_position,
                    "isChampion": entry.is_champion,
                    "wins": wins,
                    "losses": losses,
                    "winPct": wins / (wins + losses),
                }
            )
    return rows


def most_dominant_seasons(seasons: Iterable[SeasonRecord], limit: int = 10) -> list[dict[str, Any]]:
    rows = _regular_season_rows(seasons)
    rows.sort(key=lambda row: (-row["winPct"], manager_sort_key(row["manager"])))
    return rows[:limit]


def worst_champion_records(
    seasons: Iterable[SeasonRecord],
    limit: int = 5,
    threshold: float = 0.60,
) -> list[dict[str, Any]]:
    rows = [row for row in _regular_season_rows(seasons, champions_only=True) if row["winPct"] < threshold]
    rows.sort(key=lambda row: (row["winPct"], manager_sort_key(row["manager"])))
    return rows[:limit]


def championship_distribution(
    seasons: Iterable[SeasonRecord],
    stats: Iterable[ManagerStats],
) -> list[dict[str, Any]]:
    played = played_seasons(seasons)
    rows = []
    for manager in stats:
        if manager.championships <= 0:
            continue
        years = [
            season.year
            for season in played
            if any(entry.manager == manager.manager and entry.is_champion for entry in season.managers)
        ]
        rows.append({"manager": manager.manager, "championships": manager.championships, "years": years})
    rows.sort(key=lambda row: (-row["championships"], manager_sort_key(row["manager"])))
    return rows


def average_finish_rankings(
    stats: Iterable[ManagerStats],
    min_seasons: int = 3,
    limit: int = 10,
    excluded: Iterable[str] = AVERAGE_FINISH_EXCLUDED_MANAGERS,
) -> list[dict[str, Any]]:
    skip = set(excluded)
    rows = [
        {"manager": manager.manager, "averageFinish": manager.average_finish, "seasons": manager.total_seasons}
        for manager in stats
        if manager.total_seasons >= min_seasons and manager.manager not in skip
    ]
    rows.sort(key=lambda row: (row["averageFinish"], manager_sort_key(row["manager"])))
    return rows[:limit]


def playoff_rivalries(seasons: Iterable[SeasonRecord]) -> list[dict[str, Any]]:
    """Pairs that met in the playoffs, 3rd place games included, most meetings first."""
    table = HeadToHeadTable()
    for year, winner, loser in manager_pairings(seasons, include_third_place=True):
        table.get_or_create(winner, loser).register_win(winner, f"{year}: {winner} def. {loser}")
    return [record.to_dict() for record in table.top_matchups(limit=len(table))]


def league_analytics(seasons: Iterable[SeasonRecord], stats: Iterable[ManagerStats]) -> dict[str, Any]:
    played = played_seasons(seasons)
    stats_list = list(stats)
    return {
        "totalSeasons": len(played),
        "totalManagers": len(stats_list),
        "mostDominantSeasons": most_dominant_seasons(played),
        "worstChampionRecords": worst_champion_records(played),
        "championshipDistribution": championship_distribution(played, stats_list),
        "averageFinishRankings": average_finish_rankings(stats_list),
    }
