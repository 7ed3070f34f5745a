"""Static league configuration constants."""

from __future__ import annotations

from pathlib import Path

from .models import HeadToHeadCorrection

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SNAPSHOT_PATH = PROJECT_ROOT / "data" / "hockey-data.json"
SNAPSHOT_ENV_VAR = "FANTASY_HOCKEY_SNAPSHOT"
SNAPSHOT_SAVE_VERSION = 1

FIRST_LEAGUE_YEAR = 2011

SEASON_HEADING_MARKER = "## "
STANDINGS_HEADER = "| Manager | Team |"
PLAYOFF_RESULTS_LABEL = "**Playoff Results:**"
CHAMPION_TOKEN = "**Champion**"
MATCHUP_SEPARATOR = " def. "
MATCHUP_BULLET = "•"

# Checked in this order; the first label found on a line wins.
ROUND_LABELS: tuple[tuple[str, str], ...] = (
    ("quarterfinals", "*Quarterfinals:*"),
    ("semifinals", "*Semifinals:*"),
    ("finals", "*Finals:*"),
    ("third_place", "*3rd Place:*"),
    ("fifth_place", "*5th Place:*"),
    ("seventh_place", "*7th Place:*"),
    ("ninth_place", "*9th Place:*"),
)
MULTI_MATCHUP_ROUNDS = {"quarterfinals", "semifinals"}
CONSOLATION_ROUNDS = {"third_place", "seventh_place", "ninth_place"}

FINAL_POSITION_KEYWORDS: tuple[tuple[str, int], ...] = (
    ("Champion", 1),
    ("Runner-up", 2),
    ("3rd Place", 3),
    ("4th Place", 4),
)

ERAS: tuple[tuple[str, tuple[int, ...]], ...] = (
    ("Early Era", (2011, 2012, 2013, 2014, 2015, 2017)),
    ("Middle/Covid Era", (2018, 2019, 2020, 2021, 2022)),
    ("Modern Era", (2023, 2024)),
)

# Titles awarded on regular-season head-to-head rather than a playoff final.
CHAMPIONSHIP_NOTES: dict[int, str] = {
    2013: "Decided by regular season head-to-head",
    2014: "Decided by regular season head-to-head",
}

AVERAGE_FINISH_EXCLUDED_MANAGERS = ("Skinner", "anto", "unknown", "Johnny")

# The 2019 playoffs ended on a Saturday and the Dave/Sammy meeting is not in
# the bracket text. Before: Dave 1, Sammy 3 from the written brackets.
# After: one more meeting, Dave 2, Sammy 2.
KNOWN_HEAD_TO_HEAD_CORRECTIONS: tuple[HeadToHeadCorrection, ...] = (
    HeadToHeadCorrection(
        managers=("Dave", "Sammy"),
        meetings=1,
        win_deltas=(("Dave", 1), ("Sammy", -1)),
        log="2019 playoffs: (ended on a Saturday), Dave def. Sammy",
    ),
)
