"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from trip_replay.geo.models import CoordinateSample
from trip_replay.missions.storage import MissionStorage
from trip_replay.web.app import app

ASSIGNED_MS = 1_734_429_600_000  # 2024-12-17T10:00:00Z
RESOLVED_MS = ASSIGNED_MS + 20 * 60 * 1000


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_path(tmp_path):
    """SQLite file seeded with one mission of each trajectory source.

    - ``m-embedded``: trace written back on the mission (3 points)
    - ``m-history``: no trace; agent ``agent-7`` has 4 samples inside the
      assigned/resolved window and 1 after it
    - ``m-empty``: no trace and no assigned agent
    """
    path = str(tmp_path / "web_missions.db")
    storage = MissionStorage(path)
    storage.save_mission({
        "id": "m-embedded",
        "status": "Resolved",
        "emergencyType": "Medical",
        "trackingData": {
            "coordinates": [
                {"latitude": 6.5000, "longitude": 3.3000, "timestamp": 0},
                {"latitude": 6.5001, "longitude": 3.3000, "timestamp": 1000},
                {"latitude": 6.5002, "longitude": 3.3000, "timestamp": 2000},
            ],
        },
    })
    storage.save_mission({
        "id": "m-history",
        "status": "Resolved",
        "emergencyType": "Fire",
        "location": {"lat": 6.4990, "lng": 3.3000},
        "assignedTeam": {"driverId": "agent-7"},
        "assignedAt": "2024-12-17T10:00:00Z",
        "resolvedAt": {"seconds": RESOLVED_MS // 1000, "nanoseconds": 0},
    })
    storage.save_mission({"id": "m-empty", "status": "Pending", "emergencyType": "Flood"})
    storage.save_samples("agent-7", [
        CoordinateSample(6.5000 + i * 0.0001, 3.3, ASSIGNED_MS + i * 60_000)
        for i in range(4)
    ])
    storage.save_samples("agent-7", [CoordinateSample(6.6, 3.3, RESOLVED_MS + 60_000)])
    storage.close()
    return path
