from pathlib import Path

import pytest

from fantasy_hockey.models import HeadToHeadTable, ManagerSeason, PlayoffResults, SeasonRecord, WinLossRecord
from fantasy_hockey.parser import parse_document, parse_file
from fantasy_hockey.stats import (
    apply_known_corrections,
    calculate_manager_stats,
    compute_head_to_head,
    manager_sort_key,
    parse_record,
    playoff_matchups,
)

HISTORY = Path(__file__).parent / "data" / "league_history.md"

TWO_SEASONS = """\
## 2011 Season

| Manager | Team | Regular Season | Record | Playoffs | Final Result |
|---------|------|----------------|--------|----------|--------------|
| Alice | Aces | 1st | 12-7-3 | 2-0 | **Champion** |
| Bob | Bruins | 2nd | 11-8-3 | 1-1 | Runner-up |
| Carol | Comets | 3rd | 9-10-3 | - | 3rd Place |

**Playoff Results:**
- *Finals:* Alice def. Bob

## 2012 Season

| Manager | Team | Regular Season | Record | Playoffs | Final Result |
|---------|------|----------------|--------|----------|--------------|
| Alice | Aces | 2nd | 11-8-3 | 1-1 | Runner-up |
| Bob | Bruins | 3rd | 10-9-3 | - | 3rd Place |
| Carol | Comets | 1st | 13-6-3 | 2-0 | **Champion** |
"""


def _entry(manager: str, final_position: int, playoff_record: str | None = "1-1") -> ManagerSeason:
    return ManagerSeason(
        manager=manager,
        team=f"{manager} Team",
        regular_season_position=final_position,
        regular_season_record="10-10-2",
        playoff_record=playoff_record,
        final_position=final_position,
        is_champion=final_position == 1,
    )


def _by_name(stats):
    return {row.manager: row for row in stats}


def test_parse_record_tries_three_numbers_first() -> None:
    assert parse_record("12-7-3") == WinLossRecord(12, 7, 3)
    assert parse_record("4-2") == WinLossRecord(4, 2, 0)
    assert parse_record("-") is None
    assert parse_record("") is None
    assert parse_record(None) is None
    assert parse_record("DNP") is None


def test_two_season_scenario() -> None:
    seasons = parse_document(TWO_SEASONS)
    stats = _by_name(calculate_manager_stats(seasons))
    assert set(stats) == {"Alice", "Bob", "Carol"}
    assert all(row.total_seasons == 2 for row in stats.values())
    assert stats["Alice"].championships == 1
    assert stats["Carol"].championships == 1
    assert stats["Bob"].championships == 0
    assert stats["Alice"].runner_ups == 1
    assert stats["Bob"].runner_ups == 1

    table = compute_head_to_head(seasons)
    record = table.lookup("Alice", "Bob")
    assert record is not None
    assert record.playoff_meetings == 1
    assert record.wins_for("Alice") == 1
    assert record.wins_for("Bob") == 0
    assert record.matchups == ["2011 Playoffs: Alice def. Bob"]


def test_career_fold_over_history() -> None:
    stats = calculate_manager_stats(parse_file(HISTORY))
    assert [row.manager for row in stats] == ["anto", "Dave", "Gwendi", "Sammy", "Skinner", "Vin"]
    by_name = _by_name(stats)

    dave = by_name["Dave"]
    assert dave.seasons_played == [2011, 2012, 2014]
    assert dave.championships == 1
    assert dave.runner_ups == 1
    assert dave.playoff_appearances == 3
    assert dave.average_finish == pytest.approx(7 / 3)
    assert dave.regular_season_record == WinLossRecord(39, 19, 8)
    assert dave.playoff_record == WinLossRecord(3, 2, 0)

    sammy = by_name["Sammy"]
    assert sammy.championships == 2
    assert sammy.runner_ups == 1
    assert sammy.playoff_record == WinLossRecord(5, 1, 0)

    skinner = by_name["Skinner"]
    assert skinner.playoff_appearances == 0
    assert skinner.playoff_record == WinLossRecord()
    assert skinner.average_finish == 5.0


def test_average_finish_matches_seasons_played() -> None:
    seasons = parse_file(HISTORY)
    for row in calculate_manager_stats(seasons):
        assert row.total_seasons == len(row.seasons_played)
        finishes = [
            entry.final_position
            for season in seasons
            if season.year in row.seasons_played
            for entry in season.managers
            if entry.manager == row.manager
        ]
        assert row.average_finish == pytest.approx(sum(finishes) / len(finishes))


def test_champion_is_not_also_counted_as_runner_up() -> None:
    odd = _entry("Alice", 2)
    odd.is_champion = True
    stats = calculate_manager_stats([SeasonRecord(year=2011, managers=[odd])])
    assert stats[0].championships == 1
    assert stats[0].runner_ups == 0


def test_unparseable_records_contribute_nothing() -> None:
    entry = _entry("Alice", 3, playoff_record="bye")
    entry.regular_season_record = "n/a"
    stats = calculate_manager_stats([SeasonRecord(year=2011, managers=[entry])])[0]
    assert stats.regular_season_record == WinLossRecord()
    assert stats.playoff_record == WinLossRecord()
    assert stats.playoff_appearances == 1


def test_empty_seasons_are_ignored() -> None:
    seasons = [SeasonRecord(year=2011, managers=[_entry("Alice", 1)]), SeasonRecord(year=2012)]
    stats = calculate_manager_stats(seasons)
    assert stats[0].seasons_played == [2011]


def test_seasons_played_ascending_regardless_of_input_order() -> None:
    seasons = [
        SeasonRecord(year=2014, managers=[_entry("Alice", 3)]),
        SeasonRecord(year=2011, managers=[_entry("Alice", 1)]),
    ]
    stats = calculate_manager_stats(seasons)[0]
    assert stats.seasons_played == [2011, 2014]
    assert stats.average_finish == 2.0


def test_playoff_matchups_skip_consolation_rounds() -> None:
    results = PlayoffResults(
        quarterfinals=["A def. B"],
        semifinals=["C def. D"],
        finals="A def. C",
        third_place="D def. B",
        fifth_place="E def. F",
        seventh_place="G def. H",
        ninth_place="I def. J",
    )
    assert playoff_matchups(results) == ["A def. B", "C def. D", "A def. C", "E def. F"]
    assert playoff_matchups(results, include_fifth_place=False) == ["A def. B", "C def. D", "A def. C"]
    assert playoff_matchups(None) == []


def test_head_to_head_lookup_is_order_independent() -> None:
    table = compute_head_to_head(parse_file(HISTORY))
    for record in table:
        assert table.lookup(record.manager1, record.manager2) is table.lookup(record.manager2, record.manager1)
        assert record.manager1 < record.manager2


def test_head_to_head_excludes_third_place_games() -> None:
    table = compute_head_to_head(parse_file(HISTORY))
    record = table.lookup("Vin", "Gwendi")
    assert record is not None
    # Two 3rd place wins by Gwendi are not counted, the 2014 semifinal is.
    assert record.playoff_meetings == 1
    assert record.wins_for("Gwendi") == 1


def test_known_correction_applied_after_fold() -> None:
    seasons = parse_file(HISTORY)
    raw = compute_head_to_head(seasons, apply_corrections=False).lookup("Dave", "Sammy")
    assert raw is not None
    assert (raw.playoff_meetings, raw.wins_for("Dave"), raw.wins_for("Sammy")) == (3, 1, 2)

    corrected = compute_head_to_head(seasons).lookup("Sammy", "Dave")
    assert corrected is not None
    assert (corrected.playoff_meetings, corrected.wins_for("Dave"), corrected.wins_for("Sammy")) == (4, 2, 1)
    assert corrected.matchups[-1] == "2019 playoffs: (ended on a Saturday), Dave def. Sammy"


def test_known_correction_needs_both_managers() -> None:
    table = apply_known_corrections(HeadToHeadTable(), ["Dave"])
    assert len(table) == 0


@pytest.mark.regression
def test_known_correction_never_drives_wins_negative() -> None:
    table = apply_known_corrections(HeadToHeadTable(), ["Dave", "Sammy"])
    record = table.lookup("Dave", "Sammy")
    assert record is not None
    assert record.playoff_meetings == 1
    assert record.wins_for("Dave") == 1
    assert record.wins_for("Sammy") == 0


def test_top_matchups_sorted_by_meetings() -> None:
    table = compute_head_to_head(parse_file(HISTORY))
    top = table.top_matchups(limit=2)
    assert [(r.manager1, r.manager2) for r in top] == [("Dave", "Sammy"), ("Gwendi", "Sammy")]


PHANTOM_BRACKET = """\
## 2011 Season

| Manager | Team | Regular Season | Record | Playoffs | Final Result |
|---------|------|----------------|--------|----------|--------------|
| Alice | Aces | 1st | 12-7-3 | 2-0 | **Champion** |
| Bob | Bruins | 2nd | 11-8-3 | 1-1 | Runner-up |

**Playoff Results:**
- *Semifinals:* Alice def. Bobby (4) • Aces def. Bruins • Bob def. Bob
- *Finals:* Alice def. Bob
"""


@pytest.mark.regression
def test_head_to_head_only_pairs_league_managers() -> None:
    table = compute_head_to_head(parse_document(PHANTOM_BRACKET))
    assert [(r.manager1, r.manager2) for r in table] == [("Alice", "Bob")]
    record = table.lookup("Alice", "Bob")
    assert record is not None
    assert record.playoff_meetings == 1
    assert table.lookup("Alice", "Bobby") is None
    assert table.lookup("Aces", "Bruins") is None


@pytest.mark.regression
def test_manager_order_ignores_accents_and_puts_lowercase_first() -> None:
    names = ["Émile", "bob", "Zed", "Bob"]
    assert sorted(names, key=manager_sort_key) == ["bob", "Bob", "Émile", "Zed"]

    seasons = [SeasonRecord(year=2011, managers=[_entry(name, idx + 1) for idx, name in enumerate(names)])]
    assert [row.manager for row in calculate_manager_stats(seasons)] == ["bob", "Bob", "Émile", "Zed"]
