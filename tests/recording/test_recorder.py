"""Tests for SampleRecorder."""

from __future__ import annotations

import math
import threading

import pytest

from trip_replay.analysis.statistics import compute_statistics
from trip_replay.errors import AlreadyRecordingError, NotRecordingError
from trip_replay.geo.distance import EARTH_RADIUS_M
from trip_replay.geo.models import CoordinateSample
from trip_replay.recording.models import RecorderConfig
from trip_replay.recording.recorder import SampleRecorder

_M_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180.0

BASE_LAT = 6.5
BASE_LNG = 3.3


class FakeClock:
    """Epoch-ms clock advanced manually by the test."""

    def __init__(self, start_ms: int = 1_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now


def north(meters: float, ts: int, accuracy: float | None = None) -> CoordinateSample:
    """Sample *meters* due north of the base point."""
    return CoordinateSample(
        latitude=BASE_LAT + meters / _M_PER_DEG_LAT,
        longitude=BASE_LNG,
        timestamp_ms=ts,
        accuracy_m=accuracy,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder(clock):
    r = SampleRecorder(clock=clock)
    r.start()
    return r


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_start_twice_raises(self, recorder):
        with pytest.raises(AlreadyRecordingError):
            recorder.start()

    def test_stop_without_start_raises(self, clock):
        with pytest.raises(NotRecordingError):
            SampleRecorder(clock=clock).stop()

    def test_stop_twice_raises(self, recorder):
        recorder.stop()
        with pytest.raises(NotRecordingError):
            recorder.stop()

    def test_snapshot_when_idle_raises(self, clock):
        with pytest.raises(NotRecordingError):
            SampleRecorder(clock=clock).snapshot()

    def test_position_after_stop_is_noop(self, recorder):
        recorder.on_position(north(0, 0))
        recorder.stop()
        assert recorder.on_position(north(100, 1000)) is False
        assert not recorder.is_recording

    def test_can_record_again_after_stop(self, recorder):
        recorder.on_position(north(0, 0))
        recorder.stop()
        recorder.start()
        assert recorder.snapshot().path_length == 0

    def test_stop_returns_recorded_path(self, recorder):
        recorder.on_position(north(0, 0))
        recorder.on_position(north(20, 1000))
        trajectory = recorder.stop()
        assert [s.timestamp_ms for s in trajectory] == [0, 1000]


# ---------------------------------------------------------------------------
# Spatial throttle vs running statistics
# ---------------------------------------------------------------------------

class TestThrottle:
    def test_first_sample_always_stored(self, recorder):
        assert recorder.on_position(north(0, 0)) is True
        assert recorder.snapshot().path_length == 1

    def test_small_move_not_stored_but_counted(self, recorder):
        """5 m is under the 10 m throttle: path stays at 1, distance shows 5 m."""
        recorder.on_position(north(0, 0))
        assert recorder.on_position(north(5, 1000)) is False
        snap = recorder.snapshot()
        assert snap.path_length == 1
        assert snap.accumulated_distance_m == pytest.approx(5.0, rel=1e-6)

    def test_large_move_stored(self, recorder):
        recorder.on_position(north(0, 0))
        assert recorder.on_position(north(15, 1000)) is True
        assert recorder.snapshot().path_length == 2

    def test_throttle_measured_from_last_stored_point(self, recorder):
        recorder.on_position(north(0, 0))
        recorder.on_position(north(6, 1000))
        assert recorder.on_position(north(12, 2000)) is True
        snap = recorder.snapshot()
        assert snap.path_length == 2
        assert snap.accumulated_distance_m == pytest.approx(12.0, rel=1e-6)

    def test_jitter_does_not_grow_path(self, recorder):
        recorder.on_position(north(0, 0))
        for i in range(1, 500):
            recorder.on_position(north(3 if i % 2 else 0, i * 1000))
        assert recorder.snapshot().path_length == 1

    def test_custom_threshold(self, clock):
        r = SampleRecorder(RecorderConfig(min_distance_m=2.0), clock=clock)
        r.start()
        r.on_position(north(0, 0))
        assert r.on_position(north(5, 1000)) is True


# ---------------------------------------------------------------------------
# Running figures
# ---------------------------------------------------------------------------

class TestRunningFigures:
    def test_current_speed_from_previous_raw_sample(self, recorder):
        recorder.on_position(north(0, 0))
        recorder.on_position(north(5, 1000))
        assert recorder.snapshot().current_speed_kmh == pytest.approx(18.0, rel=1e-6)

    def test_same_timestamp_speed_zero(self, recorder):
        recorder.on_position(north(0, 1000))
        recorder.on_position(north(50, 1000))
        assert recorder.snapshot().current_speed_kmh == 0.0

    def test_elapsed_from_clock(self, recorder, clock):
        clock.now += 42_000
        recorder.on_position(north(0, 0))
        assert recorder.snapshot().elapsed_ms == 42_000

    def test_last_position_is_raw(self, recorder):
        recorder.on_position(north(0, 0))
        recorder.on_position(north(5, 1000))
        assert recorder.snapshot().last_position == north(5, 1000)


class TestAccuracyGate:
    def test_inaccurate_fix_ignored(self, clock):
        r = SampleRecorder(RecorderConfig(max_accuracy_m=50.0), clock=clock)
        r.start()
        r.on_position(north(0, 0, accuracy=5.0))
        assert r.on_position(north(500, 1000, accuracy=800.0)) is False
        snap = r.snapshot()
        assert snap.accumulated_distance_m == 0.0
        assert snap.last_position == north(0, 0)

    def test_missing_accuracy_accepted(self, clock):
        r = SampleRecorder(RecorderConfig(max_accuracy_m=50.0), clock=clock)
        r.start()
        assert r.on_position(north(0, 0)) is True


def test_no_sample_applies_after_stop_returns(recorder):
    """A feeder thread racing stop() never mutates the returned path."""
    stop_feeding = threading.Event()

    def feed():
        i = 0
        while not stop_feeding.is_set():
            recorder.on_position(north(i * 20, i * 1000))
            i += 1

    t = threading.Thread(target=feed)
    t.start()
    try:
        while recorder.snapshot().path_length < 5:
            pass
        trajectory = recorder.stop()
        length = len(trajectory)
        assert recorder.on_position(north(1_000_000, 0)) is False
        assert len(trajectory) == length
    finally:
        stop_feeding.set()
        t.join(timeout=2.0)


class TestShortSegmentTrip:
    """Three fixes whose first hop is shorter than the throttle distance."""

    FIXES = (
        CoordinateSample(6.5, 3.3, 0),
        CoordinateSample(6.50005, 3.30005, 1000),
        CoordinateSample(6.5001, 3.3001, 11_000),
    )

    def record(self, clock):
        r = SampleRecorder(clock=clock)
        r.start()
        stored = []
        for fix in self.FIXES:
            clock.now = fix.timestamp_ms
            stored.append(r.on_position(fix))
        return r, stored

    def test_middle_fix_is_throttled(self, clock):
        r, stored = self.record(clock)
        assert stored == [True, False, True]
        assert list(r.stop()) == [self.FIXES[0], self.FIXES[2]]

    def test_running_distance_counts_every_fix(self, clock):
        r, _ = self.record(clock)
        assert abs(r.snapshot().accumulated_distance_m - 15.67) < 0.05

    def test_statistics_of_recorded_path(self, clock):
        r, _ = self.record(clock)
        stats = compute_statistics(r.stop())
        assert stats.point_count == 2
        assert abs(stats.total_distance_meters - 15.67) < 0.05
        assert stats.max_speed_kmh == stats.min_speed_kmh
