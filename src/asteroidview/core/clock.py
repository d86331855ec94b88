"""Clocks and fixed-rate sleeping for the publisher and viewer loops."""

from __future__ import annotations

import time
from typing import Callable, Protocol


class Clock(Protocol):
    """Source of wall-clock timestamps in seconds."""

    def now(self) -> float: ...


class WallClock:
    """System wall clock (time.time)."""

    def now(self) -> float:
        return time.time()


class ManualClock:
    """Clock that only moves when told to. Used by tests and replay."""

    def __init__(self, start: float = 0.0):
        self._t = float(start)

    def now(self) -> float:
        return self._t

    def advance(self, dt: float) -> float:
        """Move the clock forward by dt seconds and return the new time."""
        if dt < 0:
            raise ValueError(f"Cannot move clock backwards (dt={dt})")
        self._t += dt
        return self._t

    def set(self, t: float) -> None:
        self._t = float(t)

    def sleep(self, dt: float) -> None:
        """Drop-in for time.sleep that advances this clock instead."""
        self.advance(max(dt, 0.0))


class Rate:
    """
    Sleep helper that keeps a loop at a fixed frequency.

    Each call to `sleep` waits for the remainder of the current period. If the
    loop overran, the schedule restarts from now instead of bursting to
    catch up.

    Args:
        hz: Target loop frequency
        clock: Clock used to measure elapsed time
        sleep: Sleep function (default time.sleep)
    """

    def __init__(
        self,
        hz: float,
        clock: Clock | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if hz <= 0:
            raise ValueError(f"Rate must be positive, got {hz}")
        self.period = 1.0 / hz
        self._clock = clock if clock is not None else WallClock()
        self._sleep = sleep
        self._next = self._clock.now() + self.period

    def sleep(self) -> float:
        """
        Sleep until the next period boundary.

        Returns:
            Seconds actually slept (0.0 when the loop overran)
        """
        remaining = self._next - self._clock.now()
        if remaining > 0:
            self._sleep(remaining)
            self._next += self.period
            return remaining
        self._next = self._clock.now() + self.period
        return 0.0
