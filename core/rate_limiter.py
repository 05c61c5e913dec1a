"""Sliding-window rate limiter keyed by caller identifier.

State is a mapping ``identifier -> [timestamps]`` held in process memory.
Timestamps older than the window are pruned lazily whenever an identifier
is touched, and identifiers whose every timestamp has expired are swept
at most once per window so the mapping does not grow without bound.

Checking and recording are separate calls. Two concurrent requests from
the same identifier can both pass :meth:`RateLimiter.check_limit` before
either calls :meth:`RateLimiter.record_request`, so the limit may be
overshot by the number of in-flight requests. This limiter is
single-process and best-effort; that gap is accepted.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class RateLimiter:
    """Per-identifier sliding-window admission control.

    Parameters
    ----------
    window_seconds : float
        Trailing duration over which requests are counted.
    max_requests : int
        Requests allowed per identifier within the window.
    clock : callable, optional
        Returns the current time in seconds. Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        window_seconds: float = 3600.0,
        max_requests: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self._window = float(window_seconds)
        self._max_requests = max_requests
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def _prune(self, identifier: str, now: float) -> List[float]:
        window_start = now - self._window
        timestamps = [t for t in self._requests.get(identifier, ()) if t > window_start]
        if timestamps:
            self._requests[identifier] = timestamps
        else:
            self._requests.pop(identifier, None)
        return timestamps

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self._window:
            self._sweep(now)

    def _sweep(self, now: float) -> int:
        window_start = now - self._window
        stale = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for key in stale:
            del self._requests[key]
        self._last_sweep = now
        if stale:
            logger.debug("Rate limiter swept %d idle identifier(s)", len(stale))
        return len(stale)

    def check_limit(self, identifier: str) -> bool:
        """Return True if a request from *identifier* is within the limit.

        Prunes expired timestamps for the identifier but does not record
        a request.
        """
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            return len(self._prune(identifier, now)) < self._max_requests

    def record_request(self, identifier: str) -> None:
        """Record a request from *identifier* at the current time."""
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            timestamps = self._prune(identifier, now)
            timestamps.append(now)
            self._requests[identifier] = timestamps

    def get_time_until_reset(self, identifier: str) -> float:
        """Seconds until the oldest recorded request leaves the window.

        This is when one slot frees up, not when the whole window clears.
        Returns 0 if the identifier has no recorded requests.
        """
        with self._lock:
            timestamps = self._requests.get(identifier)
            if not timestamps:
                return 0.0
            return max(0.0, min(timestamps) + self._window - self._clock())

    def sweep(self) -> int:
        """Drop identifiers whose requests have all expired. Returns how many."""
        with self._lock:
            return self._sweep(self._clock())

    def clear(self) -> None:
        """Forget every identifier."""
        with self._lock:
            self._requests.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)
