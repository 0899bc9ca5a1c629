"""Record a trip from a CSV position log and attach it to a mission.

Usage:
  python scripts/record_trip.py --db trips.db --mission alert-42 --csv drive.csv

Each CSV row is ``latitude,longitude,timestamp_ms[,accuracy_m]``; a header
row is skipped.  Rows are fed through the same throttled recorder used for
live tracking, so the stored path matches what the mobile app would keep.
"""

from __future__ import annotations

import argparse
import csv
import sys

from trip_replay.analysis.statistics import compute_statistics
from trip_replay.geo.distance import format_duration
from trip_replay.geo.models import CoordinateSample
from trip_replay.missions.storage import MissionStorage
from trip_replay.recording.models import RecorderConfig
from trip_replay.recording.recorder import SampleRecorder


def _read_samples(path: str) -> list[CoordinateSample]:
    samples: list[CoordinateSample] = []
    with open(path, newline="") as fh:
        for row in csv.reader(fh):
            if len(row) < 3:
                continue
            try:
                samples.append(CoordinateSample(
                    latitude=float(row[0]),
                    longitude=float(row[1]),
                    timestamp_ms=int(float(row[2])),
                    accuracy_m=float(row[3]) if len(row) > 3 and row[3] else None,
                ))
            except ValueError:
                continue  # header or malformed row
    return samples


def main() -> None:
    ap = argparse.ArgumentParser(description="Record a trip from a CSV position log")
    ap.add_argument("--db", default="trips.db", help="SQLite database path")
    ap.add_argument("--mission", required=True, help="Mission id to attach the trip to")
    ap.add_argument("--csv", required=True, help="CSV file of latitude,longitude,timestamp_ms")
    ap.add_argument("--min-distance", type=float, default=10.0, help="Throttle distance in metres")
    ap.add_argument("--max-accuracy", type=float, default=None, help="Drop fixes less accurate than this (m)")
    args = ap.parse_args()

    samples = _read_samples(args.csv)
    if not samples:
        print(f"[!] No positions found in {args.csv}", file=sys.stderr)
        sys.exit(1)

    # recorder time follows the log, not the wall clock
    current = {"ms": samples[0].timestamp_ms}
    recorder = SampleRecorder(
        RecorderConfig(min_distance_m=args.min_distance, max_accuracy_m=args.max_accuracy),
        clock=lambda: current["ms"],
    )
    recorder.start()
    for sample in samples:
        current["ms"] = sample.timestamp_ms
        recorder.on_position(sample)
    live = recorder.snapshot()
    trajectory = recorder.stop()
    stats = compute_statistics(trajectory)

    storage = MissionStorage(args.db)
    try:
        storage.save_trip(args.mission, trajectory, stats)
    finally:
        storage.close()

    print(f"Mission       : {args.mission}")
    print(f"Raw positions : {len(samples)}")
    print(f"Stored points : {stats.point_count}")
    print(f"Elapsed       : {format_duration(live.elapsed_ms)}")
    print(f"Distance      : {stats.total_distance_meters / 1000:.2f} km")
    print(f"Avg speed     : {stats.average_speed_kmh:.1f} km/h")
    print(f"Max speed     : {stats.max_speed_kmh:.1f} km/h")


if __name__ == "__main__":
    main()
