from __future__ import annotations

import os
from pathlib import Path
from threading import Lock
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .analytics import (
    championship_droughts,
    championship_timeline,
    era_summaries,
    league_analytics,
    playoff_rivalries,
)
from .config import DEFAULT_SNAPSHOT_PATH, SNAPSHOT_ENV_VAR
from .errors import SnapshotError
from .models import HeadToHeadTable
from .snapshot import LeagueSnapshot, load_snapshot
from .stats import compute_head_to_head


class ReloadSelection(BaseModel):
    # File name inside the directory of the configured snapshot.
    snapshot_path: str | None = None


class LeagueDataService:
    """Read-only view over a generated snapshot."""

    def __init__(self, snapshot_path: str | Path | None = None) -> None:
        self.snapshot_path = Path(snapshot_path or os.environ.get(SNAPSHOT_ENV_VAR) or DEFAULT_SNAPSHOT_PATH)
        self._snapshot: LeagueSnapshot | None = None
        self._head_to_head: HeadToHeadTable | None = None
        self.last_load_error: str = ""
        self._lock = Lock()

    def reload(self, snapshot_path: str | Path | None = None) -> LeagueSnapshot:
        """Load a snapshot and swap it in; on failure the current one stays."""
        path = Path(snapshot_path) if snapshot_path else self.snapshot_path
        try:
            snapshot = load_snapshot(path)
        except SnapshotError as exc:
            self.last_load_error = str(exc)
            raise
        self.snapshot_path = path
        self._snapshot = snapshot
        self._head_to_head = None
        self.last_load_error = ""
        return snapshot

    def sibling_path(self, name: str) -> Path:
        directory = self.snapshot_path.parent.resolve()
        candidate = (directory / name).resolve()
        if candidate.parent != directory:
            raise HTTPException(status_code=400, detail=f"Snapshot {name} is outside {directory}.")
        return candidate

    @property
    def snapshot(self) -> LeagueSnapshot:
        if self._snapshot is None:
            try:
                self._snapshot = load_snapshot(self.snapshot_path)
            except SnapshotError as exc:
                self.last_load_error = str(exc)
                raise
            self.last_load_error = ""
        return self._snapshot

    @property
    def head_to_head(self) -> HeadToHeadTable:
        if self._head_to_head is None:
            self._head_to_head = compute_head_to_head(self.snapshot.seasons)
        return self._head_to_head

    def meta(self) -> dict[str, Any]:
        return dict(self.snapshot.metadata)

    def seasons(self) -> list[dict[str, Any]]:
        return [season.to_dict() for season in self.snapshot.seasons]

    def season(self, year: int) -> dict[str, Any]:
        season = self.snapshot.season(year)
        if season is None:
            raise HTTPException(status_code=404, detail=f"No season recorded for {year}.")
        return season.to_dict()

    def manager_stats(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self.snapshot.manager_stats]

    def manager(self, name: str) -> dict[str, Any]:
        stats = self.snapshot.manager(name)
        if stats is None:
            raise HTTPException(status_code=404, detail=f"Unknown manager {name}.")
        return stats.to_dict()

    def matchup(self, manager1: str, manager2: str) -> dict[str, Any]:
        if manager1 == manager2:
            raise HTTPException(status_code=400, detail="Pick two different managers.")
        record = self.head_to_head.lookup(manager1, manager2)
        if record is None:
            raise HTTPException(status_code=404, detail=f"{manager1} and {manager2} have never met in the playoffs.")
        return record.to_dict()

    def top_matchups(self, limit: int = 10) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self.head_to_head.top_matchups(limit=max(0, limit))]

    def rivalries(self, limit: int = 10) -> list[dict[str, Any]]:
        return playoff_rivalries(self.snapshot.seasons)[: max(0, limit)]

    def analytics(self) -> dict[str, Any]:
        return league_analytics(self.snapshot.seasons, self.snapshot.manager_stats)

    def eras(self) -> list[dict[str, Any]]:
        return era_summaries(self.snapshot.seasons)

    def timeline(self) -> list[dict[str, Any]]:
        return championship_timeline(self.snapshot.seasons)

    def droughts(self) -> list[dict[str, Any]]:
        return championship_droughts(self.snapshot.seasons)


service = LeagueDataService()
app = FastAPI(title="Fantasy Hockey League API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SnapshotError)
def snapshot_unavailable(_request: Request, exc: SnapshotError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/meta")
def meta() -> dict[str, Any]:
    with service._lock:
        return service.meta()


@app.get("/api/seasons")
def seasons() -> list[dict[str, Any]]:
    with service._lock:
        return service.seasons()


@app.get("/api/seasons/{year}")
def season(year: int) -> dict[str, Any]:
    with service._lock:
        return service.season(year)


@app.get("/api/managers")
def managers() -> list[dict[str, Any]]:
    with service._lock:
        return service.manager_stats()


@app.get("/api/managers/{name}")
def manager(name: str) -> dict[str, Any]:
    with service._lock:
        return service.manager(name)


@app.get("/api/head-to-head")
def head_to_head(manager1: str, manager2: str) -> dict[str, Any]:
    with service._lock:
        return service.matchup(manager1, manager2)


@app.get("/api/head-to-head/top")
def top_matchups(limit: int = 10) -> list[dict[str, Any]]:
    with service._lock:
        return service.top_matchups(limit=limit)


@app.get("/api/rivalries")
def rivalries(limit: int = 10) -> list[dict[str, Any]]:
    with service._lock:
        return service.rivalries(limit=limit)


@app.get("/api/analytics")
def analytics() -> dict[str, Any]:
    with service._lock:
        return service.analytics()


@app.get("/api/eras")
def eras() -> list[dict[str, Any]]:
    with service._lock:
        return service.eras()


@app.get("/api/timeline")
def timeline() -> list[dict[str, Any]]:
    with service._lock:
        return service.timeline()


@app.get("/api/droughts")
def droughts() -> list[dict[str, Any]]:
    with service._lock:
        return service.droughts()


@app.post("/api/reload")
def reload(payload: ReloadSelection | None = None) -> dict[str, Any]:
    with service._lock:
        path = service.sibling_path(payload.snapshot_path) if payload and payload.snapshot_path else None
        try:
            snapshot = service.reload(path)
        except SnapshotError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"ok": True, "metadata": dict(snapshot.metadata)}
