"""Clocks supplying the engine's notion of "now" in whole seconds."""

import time


class SystemClock:
    """Wall-clock time, truncated to integer seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """A clock that only moves when told to; used for simulation and tests."""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"Clock start must be non-negative, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot advance clock by a negative amount ({seconds})")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> int:
        """Jump to an absolute time; the clock never moves backwards."""
        if timestamp < self._now:
            raise ValueError(f"Clock cannot move backwards ({timestamp} < {self._now})")
        self._now = int(timestamp)
        return self._now
