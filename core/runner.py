"""
Inference loop: runs on its own worker thread, independent of the camera's
frame rate. Reads the newest frame, classifies it, publishes the top-k labels.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Callable

from core.classifier import ClassifierBase, ModelLoadError
from core.models import TieBreak, top_predictions
from core.preprocess import InputBuffer
from core.sink import PredictionSink
from core.slot import LatestFrameSlot
from core.utils import LatencyWindow, format_ms

logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


class InferenceLoop:
    """Worker that loads the model, then classifies the latest frame every `interval_s`."""

    def __init__(
        self,
        classifier: ClassifierBase,
        slot: LatestFrameSlot,
        sink: PredictionSink,
        input_buffer: InputBuffer | None = None,
        interval_s: float = 0.05,
        top_k: int = 3,
        tie_break: TieBreak | None = None,
        latency_window: int = 100,
        on_average: Callable[[float], None] | None = None,
        on_fatal: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._classifier = classifier
        self._slot = slot
        self._sink = sink
        self._buffer = input_buffer or InputBuffer()
        self._interval_s = interval_s
        self._top_k = top_k
        self._tie_break = tie_break
        self._latencies = LatencyWindow(latency_window)
        self._on_average = on_average
        self._on_fatal = on_fatal
        self._state = LoopState.IDLE
        self._state_lock = threading.Lock()
        self._cancel = threading.Event()
        self._thread: threading.Thread | None = None
        self.iterations = 0
        self.inferences = 0
        self.failures = 0

    @property
    def state(self) -> LoopState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: LoopState) -> None:
        with self._state_lock:
            self._state = state
        logger.debug("Inference loop %s", state.value)

    def start(self) -> None:
        """Start the loop on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._cancel.clear()
        self._thread = threading.Thread(target=self._thread_main, name="InferenceLoop", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 2.0) -> None:
        """Request cancellation; the loop exits after its current iteration."""
        self._cancel.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Inference loop still busy after %.1fs", timeout or 0.0)
            else:
                self._thread = None

    def _thread_main(self) -> None:
        try:
            self.run(self._cancel)
        except ModelLoadError as e:
            logger.critical("%s", e)
            if self._on_fatal is not None:
                self._on_fatal(e)

    def run(self, cancel: threading.Event) -> None:
        """Load the model, then loop until `cancel` is set. Raises ModelLoadError."""
        self._load_model()
        self._set_state(LoopState.RUNNING)
        while not cancel.is_set():
            self.step()
            # Fixed pause regardless of inference time, so the UI keeps its share of CPU
            cancel.wait(self._interval_s)
        self._set_state(LoopState.STOPPED)

    def _load_model(self) -> None:
        self._set_state(LoopState.LOADING)
        logger.info("Loading model...")
        start = time.perf_counter()
        try:
            self._classifier.load()
        except ModelLoadError:
            self._set_state(LoopState.FAILED)
            raise
        except Exception as e:
            self._set_state(LoopState.FAILED)
            raise ModelLoadError(f"Failed to load {self._classifier.name or 'model'}: {e}") from e
        logger.info("Model loaded (took %s)", format_ms(time.perf_counter() - start))

    def step(self) -> bool:
        """
        One loop iteration without the pause.
        Returns True if predictions were published.
        """
        self.iterations += 1
        frame = self._slot.read_latest()
        if frame is None:
            return False

        start = time.perf_counter()
        try:
            with self._buffer.lease() as buf:
                image = buf.render(frame)
                scores = self._classifier.classify(image)
            predictions = top_predictions(scores, self._top_k, self._tie_break)
        except Exception as e:  # noqa: BLE001
            self.failures += 1
            logger.debug("Inference failed on frame %d: %s", frame.index, e)
            return False
        elapsed = time.perf_counter() - start
        self._sink.publish(predictions)
        self.inferences += 1
        self._record(elapsed)
        return True

    def _record(self, seconds: float) -> None:
        average = self._latencies.add(seconds)
        if average is None:
            return
        logger.info("Average model runtime: %s", format_ms(average))
        if self._on_average is not None:
            self._on_average(average)

    @property
    def pending_latency_samples(self) -> int:
        return self._latencies.count
