"""PositionStream — background polling of a location source with drop-oldest overflow."""

from __future__ import annotations

import collections
import logging
import threading
import time
from dataclasses import dataclass

from trip_replay.geo.models import CoordinateSample

_logger = logging.getLogger(__name__)


@dataclass
class PositionEvent:
    """A parsed position update with the monotonic time it was read."""

    sample: CoordinateSample
    received_at: float  # time.monotonic() seconds


class PositionStream:
    """Polls *source* at *target_hz* and buffers :class:`PositionEvent`.

    The buffer is a bounded deque: once it holds *queue_maxsize* events the
    oldest one is evicted for each new arrival, and :attr:`dropped` counts
    the evictions.  Consumers always see the freshest fixes.

    Parameters
    ----------
    source:
        Object with ``read_position() -> dict | None`` returning payloads
        shaped ``{latitude, longitude, accuracy?, timestamp?}``.
    target_hz:
        Polling frequency in Hz.
    queue_maxsize:
        Maximum number of events buffered.
    """

    def __init__(
        self,
        source,
        target_hz: float = 1.0,
        queue_maxsize: int = 64,
    ) -> None:
        if target_hz <= 0:
            raise ValueError(f"target_hz must be positive, got {target_hz!r}")
        self._source = source
        self._period_s = 1.0 / target_hz
        self._events: collections.deque[PositionEvent] = collections.deque(maxlen=queue_maxsize)
        self._ready = threading.Condition()
        self._dropped = 0
        self._halt = threading.Event()
        self._poller: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._poller is not None

    @property
    def dropped(self) -> int:
        """Events evicted because the buffer was full."""
        return self._dropped

    def start(self) -> None:
        """Start polling in a daemon thread.  No-op if already running."""
        if self._poller is not None:
            return
        self._halt.clear()
        self._poller = threading.Thread(target=self._poll_loop, daemon=True, name="PositionStream")
        self._poller.start()

    def stop(self) -> None:
        """Stop polling.  Buffered events stay available to :meth:`get_event`."""
        self._halt.set()
        poller, self._poller = self._poller, None
        if poller is not None:
            poller.join(timeout=2.0)

    def get_event(self, timeout: float = 0.1) -> PositionEvent | None:
        """Pop the oldest buffered event, waiting up to *timeout* s for one.

        A non-positive *timeout* never blocks.
        """
        with self._ready:
            if not self._events and timeout > 0:
                self._ready.wait_for(lambda: bool(self._events), timeout=timeout)
            return self._events.popleft() if self._events else None

    def queue_size(self) -> int:
        with self._ready:
            return len(self._events)

    def poll_once(self) -> bool:
        """Read the source once and buffer the result.

        Returns True if a valid position was buffered.
        """
        raw = self._source.read_position()
        if not raw:
            return False
        sample = CoordinateSample.from_dict(raw, default_timestamp_ms=int(time.time() * 1000))
        if sample is None:
            _logger.warning("Dropping unparsable position payload: %r", raw)
            return False
        self._push(PositionEvent(sample=sample, received_at=time.monotonic()))
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _poll_loop(self) -> None:
        next_due = time.monotonic()
        while not self._halt.is_set():
            self.poll_once()
            next_due += self._period_s
            self._halt.wait(max(0.0, next_due - time.monotonic()))

    def _push(self, event: PositionEvent) -> None:
        with self._ready:
            if len(self._events) == self._events.maxlen:
                self._dropped += 1
                _logger.debug("Position buffer full; evicted oldest fix")
            self._events.append(event)
            self._ready.notify()
