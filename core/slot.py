"""
Single-item, overwrite-on-write holder for the most recent camera frame.
"""

from __future__ import annotations

import threading

from core.models import Frame


class LatestFrameSlot:
    """Holds at most one frame. Writers never wait for readers; no backlog builds up."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Frame | None = None
        self._unread = False
        self._written = 0
        self._dropped = 0

    def write(self, frame: Frame) -> None:
        with self._lock:
            if self._unread:
                self._dropped += 1
            self._frame = frame
            self._unread = True
            self._written += 1

    def read_latest(self) -> Frame | None:
        """Return the held frame (or None) without removing it."""
        with self._lock:
            self._unread = False
            return self._frame

    def clear(self) -> None:
        with self._lock:
            self._frame = None
            self._unread = False

    @property
    def written(self) -> int:
        with self._lock:
            return self._written

    @property
    def dropped(self) -> int:
        """Frames overwritten before anyone read them."""
        with self._lock:
            return self._dropped
