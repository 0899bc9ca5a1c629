"""Replay a mission's trip in the console.

Usage:
  python scripts/replay_trip.py --db trips.db --mission alert-42 --speed 4
  python scripts/replay_trip.py --db trips.db --mission alert-42 \\
      --start 1734429600000 --end 1734431400000

Uses the embedded trace when the mission has one, otherwise the agent's
location history for the window.  Ctrl+C stops the replay.
"""

from __future__ import annotations

import argparse
import sys
import threading

from trip_replay.analysis.statistics import compute_statistics
from trip_replay.geo.distance import format_duration
from trip_replay.missions.models import TimeWindow
from trip_replay.missions.resolver import TrajectoryResolver
from trip_replay.missions.storage import MissionStorage
from trip_replay.playback.models import PlaybackFrame, PlaybackState
from trip_replay.playback.scheduler import PlaybackScheduler
from trip_replay.playback.ticker import PlaybackTicker


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay a mission trip in the console")
    ap.add_argument("--db", default="trips.db", help="SQLite database path")
    ap.add_argument("--mission", required=True, help="Mission id")
    ap.add_argument("--speed", type=float, default=1.0, help="Playback speed multiplier")
    ap.add_argument("--start", type=int, default=None, help="Window start (epoch ms)")
    ap.add_argument("--end", type=int, default=None, help="Window end (epoch ms)")
    args = ap.parse_args()

    window = None
    if args.start is not None and args.end is not None:
        window = TimeWindow(args.start, args.end)

    storage = MissionStorage(args.db)
    try:
        mission = storage.get_mission(args.mission)
        if mission is None:
            print(f"[!] Mission {args.mission!r} not found", file=sys.stderr)
            sys.exit(1)
        resolved = TrajectoryResolver(storage).resolve(mission, window)
    finally:
        storage.close()

    trajectory = resolved.trajectory
    if resolved.error:
        print(f"[!] History unavailable: {resolved.error}", file=sys.stderr)
    if trajectory.is_empty:
        print("No tracking data for this mission.")
        return

    stats = compute_statistics(trajectory)
    print(f"Mission  : {mission.mission_id} ({mission.emergency_type or 'unknown'})")
    print(f"Source   : {resolved.source.value}")
    print(f"Points   : {stats.point_count}")
    print(f"Distance : {stats.total_distance_meters / 1000:.2f} km")
    print(f"Avg/Max  : {stats.average_speed_kmh:.1f} / {stats.max_speed_kmh:.1f} km/h\n")

    finished = threading.Event()

    def show(frame: PlaybackFrame) -> None:
        if frame.sample is not None:
            print(
                f"\r{format_duration(frame.elapsed_virtual_ms)}/"
                f"{format_duration(frame.duration_virtual_ms)}  "
                f"{frame.progress_percent:5.1f}%  "
                f"({frame.sample.latitude:.5f}, {frame.sample.longitude:.5f})  "
                f"{frame.speed_kmh:6.1f} km/h",
                end="",
                flush=True,
            )
        if frame.state is PlaybackState.PAUSED and frame.index == frame.point_count - 1:
            finished.set()

    scheduler = PlaybackScheduler(speed_multiplier=args.speed)
    scheduler.add_listener(show)
    scheduler.load(trajectory)
    ticker = PlaybackTicker(scheduler)
    ticker.start()
    scheduler.play()

    try:
        finished.wait()
    except KeyboardInterrupt:
        print("\n\nReplay stopped.")
    finally:
        ticker.stop()
        scheduler.pause()
    print()


if __name__ == "__main__":
    main()
