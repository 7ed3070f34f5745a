from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import SNAPSHOT_SAVE_VERSION
from .errors import SnapshotError
from .models import ManagerStats, SeasonRecord
from .parser import parse_file
from .stats import calculate_manager_stats, played_seasons

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LeagueSnapshot:
    seasons: list[SeasonRecord] = field(default_factory=list)
    manager_stats: list[ManagerStats] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def season(self, year: int) -> SeasonRecord | None:
        for season in self.seasons:
            if season.year == year:
                return season
        return None

    def manager(self, name: str) -> ManagerStats | None:
        for stats in self.manager_stats:
            if stats.manager == name:
                return stats
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "seasons": [season.to_dict() for season in self.seasons],
            "managerStats": [stats.to_dict() for stats in self.manager_stats],
            "metadata": {**self.metadata, "saveVersion": SNAPSHOT_SAVE_VERSION},
        }


def year_range(seasons: list[SeasonRecord]) -> str:
    if not seasons:
        return ""
    years = [season.year for season in seasons]
    return f"{min(years)}-{max(years)}"


def _timestamp(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_snapshot(seasons: list[SeasonRecord], generated_at: datetime | None = None) -> LeagueSnapshot:
    played = played_seasons(seasons)
    return LeagueSnapshot(
        seasons=played,
        manager_stats=calculate_manager_stats(played),
        metadata={
            "totalSeasons": len(played),
            "yearRange": year_range(played),
            "generatedAt": _timestamp(generated_at),
            "saveVersion": SNAPSHOT_SAVE_VERSION,
        },
    )


def write_snapshot(path: str | Path, snapshot: LeagueSnapshot, *, with_backup: bool = True) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if with_backup and target.exists():
        backup = target.with_suffix(target.suffix + ".bak")
        try:
            shutil.copy2(target, backup)
        except OSError as exc:
            logger.warning("Could not back up %s: %s", target, exc)
    # The target is only ever replaced by a fully written file.
    tmp = target.with_suffix(target.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as handle:
        json.dump(snapshot.to_dict(), handle, indent=2, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp, target)
    return target


def generate_snapshot(source_path: str | Path, output_path: str | Path) -> LeagueSnapshot:
    """Parse the history document and write its snapshot.

    Raises ``SourceDocumentError`` before anything is written when the
    document cannot be read.
    """
    seasons = parse_file(source_path)
    snapshot = build_snapshot(seasons)
    write_snapshot(output_path, snapshot)
    logger.info(
        "Wrote %s (%d seasons, %d managers)",
        output_path,
        len(snapshot.seasons),
        len(snapshot.manager_stats),
    )
    return snapshot


def load_snapshot(path: str | Path) -> LeagueSnapshot:
    source = Path(path)
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise SnapshotError(f"Failed to load snapshot {source} ({exc}).") from exc
    if not isinstance(raw, dict):
        raise SnapshotError(f"Snapshot {source} has invalid format.")

    metadata = raw.get("metadata", {})
    if not isinstance(metadata, dict):
        metadata = {}
    version = int(metadata.get("saveVersion", 1) or 1)
    if version > SNAPSHOT_SAVE_VERSION:
        raise SnapshotError(
            f"Unsupported snapshot version {version}; app supports up to {SNAPSHOT_SAVE_VERSION}."
        )

    seasons_raw = raw.get("seasons", [])
    stats_raw = raw.get("managerStats", [])
    if not isinstance(seasons_raw, list) or not isinstance(stats_raw, list):
        raise SnapshotError(f"Snapshot {source} payload is invalid.")
    try:
        seasons = [SeasonRecord.from_dict(row) for row in seasons_raw if isinstance(row, dict)]
        stats = [ManagerStats.from_dict(row) for row in stats_raw if isinstance(row, dict)]
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"Snapshot {source} payload is invalid ({exc}).") from exc
    return LeagueSnapshot(
        seasons=seasons,
        manager_stats=stats,
        metadata=metadata,
    )
