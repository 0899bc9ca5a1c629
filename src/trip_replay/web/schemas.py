"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str


class SampleIn(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timestamp: int


class SampleOut(BaseModel):
    latitude: float
    longitude: float
    timestamp: int


class StatisticsOut(BaseModel):
    total_distance_meters: float
    average_speed_kmh: float
    max_speed_kmh: float
    min_speed_kmh: float
    point_count: int


class WindowOut(BaseModel):
    start_ms: int
    end_ms: int


class MissionSummary(BaseModel):
    id: str
    status: str
    emergency_type: str
    agent_id: str | None
    has_trace: bool
    point_count: int


class MissionsResponse(BaseModel):
    missions: list[MissionSummary]


class ReplayResponse(BaseModel):
    mission_id: str
    source: str
    window: WindowOut | None
    error: str | None
    points: list[SampleOut]
    statistics: StatisticsOut
    duration: str
    """Trip duration as ``MM:SS``."""


class TripUpload(BaseModel):
    coordinates: list[SampleIn]


class SamplesUpload(BaseModel):
    samples: list[SampleIn] = Field(min_length=1)


class SamplesResponse(BaseModel):
    agent_id: str
    saved: int
