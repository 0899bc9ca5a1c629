"""FastAPI Web application — JSON endpoints for the replay dashboard."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from trip_replay import __version__
from trip_replay.errors import MissionNotFoundError, StoreError
from trip_replay.geo.distance import format_duration
from trip_replay.geo.models import CoordinateSample
from trip_replay.web.schemas import (
    HealthResponse,
    MissionsResponse,
    MissionSummary,
    ReplayResponse,
    SampleOut,
    SamplesResponse,
    SamplesUpload,
    StatisticsOut,
    TripUpload,
    WindowOut,
)
from trip_replay.web.service import ReplayService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(title="Trip Replay", version=__version__)

_DEFAULT_DB = os.environ.get("TRIP_REPLAY_DB", "trips.db")


def _service(db_path: str | None = None) -> ReplayService:
    return ReplayService(db_path or _DEFAULT_DB)


def _to_samples(items) -> list[CoordinateSample]:
    return [
        CoordinateSample(latitude=s.latitude, longitude=s.longitude, timestamp_ms=s.timestamp)
        for s in items
    ]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.get("/api/missions", response_model=MissionsResponse)
def list_missions(with_trace: bool = False, db: str | None = None) -> MissionsResponse:
    """Return missions, optionally only those carrying a recorded trace."""
    try:
        missions = _service(db).list_missions(with_trace_only=with_trace)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return MissionsResponse(
        missions=[
            MissionSummary(
                id=m.mission_id,
                status=m.status,
                emergency_type=m.emergency_type,
                agent_id=m.agent_id,
                has_trace=m.has_trace,
                point_count=len(m.trajectory) if m.trajectory is not None else 0,
            )
            for m in missions
        ]
    )


@app.get("/api/missions/{mission_id}/replay", response_model=ReplayResponse)
def replay(
    mission_id: str,
    start: int | None = None,
    end: int | None = None,
    db: str | None = None,
) -> ReplayResponse:
    """Resolve the trajectory to replay for a mission, with its statistics."""
    try:
        resolved, stats = _service(db).replay(mission_id, start, end)
    except MissionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    window = resolved.window
    return ReplayResponse(
        mission_id=mission_id,
        source=resolved.source.value,
        window=WindowOut(start_ms=window.start_ms, end_ms=window.end_ms) if window else None,
        error=resolved.error,
        points=[SampleOut(**s.to_dict()) for s in resolved.trajectory],
        statistics=StatisticsOut(**stats.to_dict()),
        duration=format_duration(resolved.trajectory.duration_ms),
    )


@app.post("/api/missions/{mission_id}/trip", response_model=StatisticsOut)
def record_trip(mission_id: str, body: TripUpload, db: str | None = None) -> StatisticsOut:
    """Attach a recorded trajectory to a mission and return its statistics."""
    try:
        stats = _service(db).record_trip(mission_id, _to_samples(body.coordinates))
    except MissionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return StatisticsOut(**stats.to_dict())


@app.post("/api/agents/{agent_id}/samples", response_model=SamplesResponse)
def save_samples(agent_id: str, body: SamplesUpload, db: str | None = None) -> SamplesResponse:
    """Append location history for an agent."""
    try:
        saved = _service(db).save_samples(agent_id, _to_samples(body.samples))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return SamplesResponse(agent_id=agent_id, saved=saved)
