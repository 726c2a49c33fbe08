"""
Fixed-size model input buffer, allocated once and reused for every inference.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

import cv2
import numpy as np

from core.models import Frame


class BufferBusyError(RuntimeError):
    """Raised when a second user tries to take the input buffer while it is leased."""


class InputBuffer:
    """
    RGB uint8 array of the model input size.

    A BGR staging array of the same size receives the resize so that neither
    step allocates per frame.
    """

    def __init__(self, size: tuple[int, int] = (256, 256)) -> None:
        width, height = size
        self._size = (int(width), int(height))
        self._staging = np.zeros((height, width, 3), dtype=np.uint8)
        self._rgb = np.zeros((height, width, 3), dtype=np.uint8)
        self._lease = threading.Lock()

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)."""
        return self._size

    @property
    def array(self) -> np.ndarray:
        return self._rgb

    @contextmanager
    def lease(self) -> Iterator[InputBuffer]:
        """Exclusive use for one inference call. Never waits: a concurrent lease raises."""
        if not self._lease.acquire(blocking=False):
            raise BufferBusyError("input buffer is already in use")
        try:
            yield self
        finally:
            self._lease.release()

    def render(self, frame: Frame) -> np.ndarray:
        """Resize `frame` to the input size and convert it to RGB in place."""
        image = frame.image
        if image is None or image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"unsupported frame shape: {getattr(image, 'shape', None)}")
        cv2.resize(image, self._size, dst=self._staging, interpolation=cv2.INTER_AREA)
        if frame.pixel_format == "RGB":
            np.copyto(self._rgb, self._staging)
        else:
            cv2.cvtColor(self._staging, cv2.COLOR_BGR2RGB, dst=self._rgb)
        return self._rgb
