from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator


@dataclass(slots=True)
class ManagerSeason:
    manager: str
    team: str
    regular_season_position: int
    regular_season_record: str
    playoff_record: str | None
    final_position: int
    is_champion: bool

    @property
    def made_playoffs(self) -> bool:
        return bool(self.playoff_record) and self.playoff_record != "-"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "manager": self.manager,
            "team": self.team,
            "regularSeasonPosition": self.regular_season_position,
            "regularSeasonRecord": self.regular_season_record,
        }
        if self.playoff_record is not None:
            out["playoffRecord"] = self.playoff_record
        out["finalPosition"] = self.final_position
        out["isChampion"] = self.is_champion
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ManagerSeason:
        playoff_record = raw.get("playoffRecord")
        return cls(
            manager=str(raw.get("manager", "")),
            team=str(raw.get("team", "")),
            regular_season_position=int(raw.get("regularSeasonPosition", 0) or 0),
            regular_season_record=str(raw.get("regularSeasonRecord", "")),
            playoff_record=str(playoff_record) if playoff_record is not None else None,
            final_position=int(raw.get("finalPosition", 0) or 0),
            is_champion=bool(raw.get("isChampion", False)),
        )


@dataclass(slots=True)
class PlayoffResults:
    quarterfinals: list[str] | None = None
    semifinals: list[str] | None = None
    finals: str | None = None
    third_place: str | None = None
    fifth_place: str | None = None
    seventh_place: str | None = None
    ninth_place: str | None = None

    # Attribute name -> JSON key, in bracket order.
    FIELD_KEYS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("quarterfinals", "quarterfinals"),
        ("semifinals", "semifinals"),
        ("finals", "finals"),
        ("third_place", "thirdPlace"),
        ("fifth_place", "fifthPlace"),
        ("seventh_place", "seventhPlace"),
        ("ninth_place", "ninthPlace"),
    )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, key in self.FIELD_KEYS:
            value = getattr(self, attr)
            if value is None:
                continue
            out[key] = list(value) if isinstance(value, list) else value
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PlayoffResults:
        results = cls()
        for attr, key in cls.FIELD_KEYS:
            value = raw.get(key)
            if value is None:
                continue
            if attr in {"quarterfinals", "semifinals"}:
                if isinstance(value, list):
                    setattr(results, attr, [str(item) for item in value])
            else:
                setattr(results, attr, str(value))
        return results


@dataclass(slots=True)
class SeasonRecord:
    year: int
    managers: list[ManagerSeason] = field(default_factory=list)
    playoff_results: PlayoffResults | None = None
    notes: str | None = None

    @property
    def champion(self) -> ManagerSeason | None:
        for entry in self.managers:
            if entry.is_champion:
                return entry
        return None

    @property
    def runner_up(self) -> ManagerSeason | None:
        for entry in self.managers:
            if entry.final_position == 2 and not entry.is_champion:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "year": self.year,
            "managers": [entry.to_dict() for entry in self.managers],
        }
        if self.playoff_results is not None:
            out["playoffResults"] = self.playoff_results.to_dict()
        if self.notes is not None:
            out["notes"] = self.notes
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SeasonRecord:
        managers = raw.get("managers", [])
        playoffs = raw.get("playoffResults")
        notes = raw.get("notes")
        return cls(
            year=int(raw["year"]),
            managers=[ManagerSeason.from_dict(row) for row in managers if isinstance(row, dict)],
            playoff_results=PlayoffResults.from_dict(playoffs) if isinstance(playoffs, dict) else None,
            notes=str(notes) if notes is not None else None,
        )


@dataclass(slots=True)
class WinLossRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_pct(self) -> float:
        decided = self.wins + self.losses
        if decided <= 0:
            return 0.0
        return self.wins / decided

    def add(self, other: WinLossRecord) -> None:
        self.wins += other.wins
        self.losses += other.losses
        self.ties += other.ties

    def __str__(self) -> str:
        return f"{self.wins}-{self.losses}-{self.ties}"


@dataclass(slots=True)
class ManagerStats:
    manager: str
    total_seasons: int = 0
    championships: int = 0
    runner_ups: int = 0
    playoff_appearances: int = 0
    average_finish: float = 0.0
    regular_season_record: WinLossRecord = field(default_factory=WinLossRecord)
    playoff_record: WinLossRecord = field(default_factory=WinLossRecord)
    seasons_played: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "manager": self.manager,
            "totalSeasons": self.total_seasons,
            "championships": self.championships,
            "runnerUps": self.runner_ups,
            "playoffAppearances": self.playoff_appearances,
            "averageFinish": self.average_finish,
            "regularSeasonRecord": {
                "wins": self.regular_season_record.wins,
                "losses": self.regular_season_record.losses,
                "ties": self.regular_season_record.ties,
            },
            "playoffRecord": {
                "wins": self.playoff_record.wins,
                "losses": self.playoff_record.losses,
            },
            "seasonsPlayed": list(self.seasons_played),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ManagerStats:
        regular = raw.get("regularSeasonRecord") or {}
        playoff = raw.get("playoffRecord") or {}
        return cls(
            manager=str(raw.get("manager", "")),
            total_seasons=int(raw.get("totalSeasons", 0) or 0),
            championships=int(raw.get("championships", 0) or 0),
            runner_ups=int(raw.get("runnerUps", 0) or 0),
            playoff_appearances=int(raw.get("playoffAppearances", 0) or 0),
            average_finish=float(raw.get("averageFinish", 0.0) or 0.0),
            regular_season_record=WinLossRecord(
                wins=int(regular.get("wins", 0)),
                losses=int(regular.get("losses", 0)),
                ties=int(regular.get("ties", 0)),
            ),
            playoff_record=WinLossRecord(
                wins=int(playoff.get("wins", 0)),
                losses=int(playoff.get("losses", 0)),
            ),
            seasons_played=[int(year) for year in raw.get("seasonsPlayed", [])],
        )


def pair_key(first: str, second: str) -> tuple[str, str]:
    """Canonical unordered key for two manager names (code point order)."""
    return (first, second) if first < second else (second, first)


@dataclass(slots=True)
class HeadToHeadRecord:
    manager1: str
    manager2: str
    playoff_meetings: int = 0
    manager1_wins: int = 0
    manager2_wins: int = 0
    matchups: list[str] = field(default_factory=list)

    def wins_for(self, manager: str) -> int:
        if manager == self.manager1:
            return self.manager1_wins
        if manager == self.manager2:
            return self.manager2_wins
        return 0

    def register_win(self, winner: str, log_line: str) -> None:
        self.playoff_meetings += 1
        if winner == self.manager1:
            self.manager1_wins += 1
        elif winner == self.manager2:
            self.manager2_wins += 1
        self.matchups.append(log_line)

    def to_dict(self) -> dict[str, Any]:
        return {
            "manager1": self.manager1,
            "manager2": self.manager2,
            "playoffMeetings": self.playoff_meetings,
            "manager1Wins": self.manager1_wins,
            "manager2Wins": self.manager2_wins,
            "matchups": list(self.matchups),
        }


@dataclass(frozen=True, slots=True)
class HeadToHeadCorrection:
    """A playoff meeting the bracket text does not capture."""

    managers: tuple[str, str]
    meetings: int
    win_deltas: tuple[tuple[str, int], ...]
    log: str


class HeadToHeadTable:
    """Head-to-head records keyed by unordered manager pair."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], HeadToHeadRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[HeadToHeadRecord]:
        return iter(self._records.values())

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return pair_key(str(pair[0]), str(pair[1])) in self._records

    def get_or_create(self, first: str, second: str) -> HeadToHeadRecord:
        key = pair_key(first, second)
        record = self._records.get(key)
        if record is None:
            record = HeadToHeadRecord(manager1=key[0], manager2=key[1])
            self._records[key] = record
        return record

    def lookup(self, first: str, second: str) -> HeadToHeadRecord | None:
        return self._records.get(pair_key(first, second))

    def records(self) -> list[HeadToHeadRecord]:
        return list(self._records.values())

    def top_matchups(self, limit: int = 10) -> list[HeadToHeadRecord]:
        met = [record for record in self._records.values() if record.playoff_meetings > 0]
        met.sort(key=lambda record: -record.playoff_meetings)
        return met[:limit]
