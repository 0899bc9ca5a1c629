"""Best-effort normalization of externally sourced time values.

Mission documents carry timestamps in whatever shape the document store
produced: native ``datetime`` objects, timestamp objects exposing a
conversion method, ``{seconds, nanoseconds}`` records, ISO-8601 strings or
plain epoch milliseconds.  Everything is normalized to epoch milliseconds.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Mapping
from datetime import datetime, timezone

_logger = logging.getLogger(__name__)

_CONVERTERS = ("to_datetime", "ToDatetime", "toDate")


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_timestamp(value) -> int | None:
    """Return *value* as epoch milliseconds, or None if it cannot be read.

    None input returns None silently; any other unrecognized shape is logged.
    """
    if value is None:
        return None
    try:
        result = _parse(value)
    except (TypeError, ValueError, OverflowError, OSError):
        result = None
    if result is None:
        _logger.warning("Unrecognized timestamp value: %r", value)
    return result


def normalize_timestamp(value, now: int | None = None) -> int:
    """Return *value* as epoch milliseconds, falling back to *now*.

    Never raises.  When *now* is None the current wall-clock time is used.
    """
    parsed = parse_timestamp(value)
    if parsed is not None:
        return parsed
    return now if now is not None else now_ms()


def _parse(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _datetime_ms(value)
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        return _iso_ms(value)
    for name in _CONVERTERS:
        converter = getattr(value, name, None)
        if callable(converter):
            try:
                converted = converter()
            except Exception as exc:
                _logger.debug("Timestamp converter %s() raised %r", name, exc)
                return None
            return _datetime_ms(converted) if isinstance(converted, datetime) else None
    seconds, nanos = _seconds_fields(value)
    if seconds is None:
        return None
    return int(seconds * 1000 + (nanos or 0) // 1_000_000)


def _seconds_fields(value) -> tuple[float | None, int | None]:
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds"))
    else:
        seconds = getattr(value, "seconds", None)
        nanos = getattr(value, "nanoseconds", getattr(value, "nanos", None))
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return None, None
    if not math.isfinite(seconds):
        return None, None
    if isinstance(nanos, bool) or not isinstance(nanos, int):
        nanos = None
    return seconds, nanos


def _iso_ms(text: str) -> int | None:
    text = text.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _datetime_ms(datetime.fromisoformat(text))


def _datetime_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))
