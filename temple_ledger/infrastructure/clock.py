"""Clocks — server-side timestamp sources implementing core Clock.

Invariants:
    - All timestamps are timezone-aware UTC
    - MonotonicClock.now() never returns a value earlier than its previous result,
      even if the wall clock steps backwards

Design Decisions:
    - One MonotonicClock per process, shared by every request (api/dependencies.py)
"""

import threading
from datetime import datetime, timezone

from temple_ledger.core.boundary_protocols import Clock


class SystemClock:
    """Wall-clock UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class MonotonicClock:
    """Wraps a clock so successive readings are non-decreasing."""

    def __init__(self, source: Clock | None = None):
        self._source = source or SystemClock()
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._source.now()
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current
