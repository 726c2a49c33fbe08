"""
Utility helpers used across the app.
"""

import time
from collections import deque
from typing import Deque, List, Optional


class LatencyWindow:
    """
    Collects inference durations (seconds) and yields their mean every
    `capacity` samples, after which the window starts empty again.
    """

    def __init__(self, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._samples: List[float] = []

    def add(self, seconds: float) -> Optional[float]:
        """Record one duration. Returns the window average when it fills, else None."""
        self._samples.append(seconds)
        if len(self._samples) < self._capacity:
            return None
        average = sum(self._samples) / len(self._samples)
        self._samples.clear()
        return average

    @property
    def count(self) -> int:
        return len(self._samples)

    @property
    def capacity(self) -> int:
        return self._capacity


class RollingAverage:
    """Rolling average over the last N values."""

    def __init__(self, maxlen: int = 30) -> None:
        self._values: Deque[float] = deque(maxlen=maxlen)

    def add(self, value: float) -> None:
        self._values.append(value)

    @property
    def average(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values) / len(self._values)

    def clear(self) -> None:
        self._values.clear()


class FPSCounter:
    """Preview frame rate, smoothed over the last few ticks."""

    def __init__(self, rolling_size: int = 30) -> None:
        self._last_time: Optional[float] = None
        self._intervals = RollingAverage(maxlen=rolling_size)

    def tick(self) -> float:
        """Call once per displayed frame. Returns the smoothed fps."""
        now = time.perf_counter()
        if self._last_time is not None:
            self._intervals.add(now - self._last_time)
        self._last_time = now
        return self.fps

    @property
    def fps(self) -> float:
        avg = self._intervals.average
        return 1.0 / avg if avg > 0 else 0.0

    def reset(self) -> None:
        self._last_time = None
        self._intervals.clear()


def format_ms(seconds: float) -> str:
    return f"{seconds * 1000.0:.1f} ms"
