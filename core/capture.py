"""
Video capture: webcam by index or video file. Exposes frames as a lazy,
single-use stream and a worker thread that keeps only the newest one.
"""

from __future__ import annotations

import logging
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Iterator, List, Tuple

import cv2

from core.models import Frame
from core.slot import LatestFrameSlot

logger = logging.getLogger(__name__)


class VideoCaptureSource:
    """Unified source for webcam (by index) or video file."""

    def __init__(self) -> None:
        self._cap: cv2.VideoCapture | None = None
        self._source_path: str | None = None  # None = webcam
        self._camera_index: int = 0

    def open_camera(self, index: int = 0) -> bool:
        """Open default or specified webcam. Returns True on success."""
        self.close()
        # On Windows, use DirectShow so index order matches list_cameras()
        if sys.platform == "win32":
            self._cap = cv2.VideoCapture(index, cv2.CAP_DSHOW)
        else:
            self._cap = cv2.VideoCapture(index)
        self._source_path = None
        self._camera_index = index
        return self._cap.isOpened()

    def open_file(self, path: str | Path) -> bool:
        """Open a video file. Returns True on success."""
        self.close()
        path_str = str(path)
        self._cap = cv2.VideoCapture(path_str)
        self._source_path = path_str
        return self._cap.isOpened()

    def rewind(self) -> bool:
        if self._cap is None or self._source_path is None:
            return False
        return bool(self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0))

    def close(self) -> None:
        """Release the current source."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._source_path = None

    def is_opened(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def read(self) -> tuple[bool, cv2.typing.MatLike | None]:
        """Read next frame. Returns (success, frame_bgr)."""
        if self._cap is None:
            return False, None
        return self._cap.read()

    def get_fps(self) -> float:
        if self._cap is None:
            return 30.0
        fps = self._cap.get(cv2.CAP_PROP_FPS)
        return fps if fps > 0 else 30.0

    def get_size(self) -> tuple[int, int]:
        """(width, height) of the stream."""
        if self._cap is None:
            return 0, 0
        w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return w, h

    @property
    def source_path(self) -> str | None:
        return self._source_path

    @property
    def camera_index(self) -> int:
        return self._camera_index


class FrameSource:
    """
    Lazy frame stream over an opened capture. The stream can be iterated once;
    create a new FrameSource to restart.
    """

    def __init__(
        self,
        capture: VideoCaptureSource,
        loop_video: bool = False,
        retry_delay_s: float = 0.1,
    ) -> None:
        self._capture = capture
        self._loop_video = loop_video
        self._retry_delay_s = retry_delay_s
        self._consumed = False
        self._closed = threading.Event()

    def frames(self) -> Iterator[Frame]:
        if self._consumed:
            raise RuntimeError("FrameSource already consumed; create a new one")
        self._consumed = True
        return self._generate()

    def close(self) -> None:
        """End the stream at the next read."""
        self._closed.set()

    def _generate(self) -> Iterator[Frame]:
        index = 0
        is_file = self._capture.source_path is not None
        while not self._closed.is_set() and self._capture.is_opened():
            ok, image = self._capture.read()
            if not ok or image is None:
                if not is_file:
                    # Camera glitch: brief retry
                    self._closed.wait(self._retry_delay_s)
                    continue
                if self._loop_video and self._capture.rewind():
                    logger.debug("Video ended, looping back to start")
                    continue
                logger.info("Video playback finished")
                return
            yield Frame.from_image(image, index=index)
            index += 1


class CaptureWorker:
    """Background thread that copies every frame from a FrameSource into a LatestFrameSlot."""

    def __init__(
        self,
        source: FrameSource,
        slot: LatestFrameSlot,
        pace_fps: float | None = None,
        on_finished: Callable[[], None] | None = None,
    ) -> None:
        self._source = source
        self._slot = slot
        # Called on the capture thread once the stream has ended or been stopped
        self._on_finished = on_finished
        # Video files read as fast as the disk allows; pace them to the file's fps.
        self._frame_interval = 1.0 / pace_fps if pace_fps else 0.0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="CaptureWorker", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        self._source.close()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        logger.info("Capture started")
        for frame in self._source.frames():
            self._slot.write(frame)
            if self._stop_event.is_set():
                break
            if self._frame_interval:
                time.sleep(self._frame_interval)
        logger.info("Capture stopped")
        if self._on_finished is not None:
            self._on_finished()


def _probe_opencv(max_cameras: int = 10) -> List[Tuple[int, str]]:
    """Probe indices 0..max_cameras-1; return (index, 'Camera N') for each that opens."""
    result: List[Tuple[int, str]] = []
    for i in range(max_cameras):
        cap = cv2.VideoCapture(i)
        if cap.isOpened():
            result.append((i, f"Camera {i}"))
            cap.release()
    return result


def list_cameras() -> List[Tuple[int, str]]:
    """
    Return list of (index, display_name) for available cameras.
    On Windows with pygrabber: DirectShow device names (same order as CAP_DSHOW).
    Otherwise: "Camera 0", "Camera 1", ... from OpenCV probing.
    """
    if sys.platform == "win32":
        try:
            from pygrabber.dshow_graph import FilterGraph
        except ImportError:
            logger.debug("pygrabber not installed, probing cameras with OpenCV")
        else:
            devices = FilterGraph().get_input_devices()
            if devices:
                return list(enumerate(devices))
    return _probe_opencv()
