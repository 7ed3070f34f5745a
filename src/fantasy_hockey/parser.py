"""
League history document parser.

Turns the Markdown league history (one ``## <year> Season`` section per
season, a standings table and an optional playoff results block) into
``SeasonRecord`` objects. Anything malformed degrades to an absent value;
only an unreadable source document is an error.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .config import (
    CHAMPION_TOKEN,
    FINAL_POSITION_KEYWORDS,
    MATCHUP_BULLET,
    MATCHUP_SEPARATOR,
    MULTI_MATCHUP_ROUNDS,
    PLAYOFF_RESULTS_LABEL,
    ROUND_LABELS,
    SEASON_HEADING_MARKER,
    STANDINGS_HEADER,
)
from .errors import SourceDocumentError
from .models import ManagerSeason, PlayoffResults, SeasonRecord

logger = logging.getLogger(__name__)

SEASON_HEADING_RE = re.compile(r"^\d{4} Season")
YEAR_RE = re.compile(r"(\d{4}) Season")
DIGITS_RE = re.compile(r"(\d+)")
NOTE_RE = re.compile(r"\*\*Note:\*\* (.+)")
ROUND_PREFIX_RE = re.compile(r"- \*[^*]+\*")
PARENTHETICAL_MARKER = " ("


def read_document(path: str | Path) -> str:
    """Read the whole history document, failing hard if it cannot be read."""
    source = Path(path)
    try:
        return source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceDocumentError(f"Cannot read league history document {source}: {exc}") from exc


def parse_document(text: str) -> list[SeasonRecord]:
    seasons: list[SeasonRecord] = []
    for section in text.split(SEASON_HEADING_MARKER):
        if not SEASON_HEADING_RE.match(section):
            continue
        season = parse_season_section(section)
        if season is None:
            continue
        if not season.managers:
            # No standings rows means the season did not happen.
            logger.debug("Skipping %s season: no manager rows", season.year)
            continue
        seasons.append(season)
    logger.debug("Parsed %d seasons", len(seasons))
    return seasons


def parse_file(path: str | Path) -> list[SeasonRecord]:
    return parse_document(read_document(path))


def parse_season_section(section: str) -> SeasonRecord | None:
    lines = section.split("\n")
    year_match = YEAR_RE.search(lines[0])
    if not year_match:
        return None

    season = SeasonRecord(year=int(year_match.group(1)))
    season.managers = _parse_standings(lines, season.year)

    playoff_start = _find_line(lines, PLAYOFF_RESULTS_LABEL)
    if playoff_start > -1:
        season.playoff_results = parse_playoff_results(lines[playoff_start:])

    note_match = NOTE_RE.search(section)
    if note_match:
        season.notes = note_match.group(1)
    return season


def _find_line(lines: list[str], needle: str) -> int:
    for idx, line in enumerate(lines):
        if needle in line:
            return idx
    return -1


def _parse_standings(lines: list[str], year: int) -> list[ManagerSeason]:
    table_start = _find_line(lines, STANDINGS_HEADER)
    if table_start < 0:
        logger.debug("%s season has no standings table", year)
        return []

    managers: list[ManagerSeason] = []
    # Skip the header row and the |---| separator.
    for raw_line in lines[table_start + 2:]:
        line = raw_line.strip()
        if not line.startswith("|") or line == "|":
            break
        entry = parse_manager_row(line)
        if entry is None:
            logger.debug("%s season: rejected short row %r", year, line)
            continue
        managers.append(entry)
    return managers


def parse_manager_row(line: str) -> ManagerSeason | None:
    cells = [cell.strip() for cell in line.split("|")]
    cells = [cell for cell in cells if cell]
    if len(cells) < 6:
        return None

    return ManagerSeason(
        manager=cells[0],
        team=cells[1],
        regular_season_position=parse_position(cells[2]),
        regular_season_record=cells[3],
        playoff_record=None if cells[4] == "-" else cells[4],
        final_position=parse_final_position(cells[5]),
        is_champion=CHAMPION_TOKEN in cells[5],
    )


def parse_position(text: str) -> int:
    match = DIGITS_RE.search(text)
    return int(match.group(1)) if match else 0


def parse_final_position(text: str) -> int:
    for keyword, position in FINAL_POSITION_KEYWORDS:
        if keyword in text:
            return position
    return parse_position(text)


def parse_playoff_results(lines: list[str]) -> PlayoffResults:
    """Read round lines from the playoff results label to the end of the section.

    A later line for the same round replaces an earlier one.
    """
    results = PlayoffResults()
    for line in lines:
        for attr, label in ROUND_LABELS:
            if label not in line:
                continue
            if attr in MULTI_MATCHUP_ROUNDS:
                setattr(results, attr, extract_matchups(line))
            else:
                setattr(results, attr, line.replace(f"- {label}", "", 1).strip())
            break
    return results


def extract_matchups(line: str) -> list[str]:
    content = ROUND_PREFIX_RE.sub("", line, count=1).strip()
    return [part.strip() for part in content.split(MATCHUP_BULLET) if part.strip()]


def strip_emphasis(text: str) -> str:
    return text.replace("**", "")


def parse_matchup(text: str) -> tuple[str, str] | None:
    """Return ``(winner, loser)`` from ``"<Winner> def. <Loser>"`` text."""
    if MATCHUP_SEPARATOR not in text:
        return None
    parts = strip_emphasis(text).split(MATCHUP_SEPARATOR)
    if len(parts) != 2:
        return None
    winner = parts[0].split(PARENTHETICAL_MARKER)[0].strip()
    loser = parts[1].split(PARENTHETICAL_MARKER)[0].strip()
    if not winner or not loser:
        return None
    return winner, loser
