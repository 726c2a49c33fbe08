"""
Qt adapters that move worker-thread events onto the GUI thread.
"""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, Signal

from core.models import PredictionSet
from core.sink import PredictionSink


class PredictionBridge(QObject):
    """
    Subscribes to a PredictionSink and re-emits each set as a Qt signal.
    Slots on GUI objects receive it on the GUI thread (queued connection).
    """

    predictions_changed = Signal(object)
    # Average model runtime in seconds
    average_latency = Signal(float)

    def __init__(self, sink: PredictionSink, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._unsubscribe: Callable[[], None] | None = sink.subscribe(self._on_predictions)

    def _on_predictions(self, predictions: PredictionSet) -> None:
        self.predictions_changed.emit(predictions)

    def report_average(self, seconds: float) -> None:
        self.average_latency.emit(seconds)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


class _LogSignals(QObject):
    record_emitted = Signal(str)


class QtLogHandler(logging.Handler):
    """logging.Handler that re-emits each formatted record via `signals.record_emitted`."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.signals = _LogSignals()
        self.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s", datefmt="%H:%M:%S"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.signals.record_emitted.emit(self.format(record))
        except RuntimeError:
            # Qt object already deleted during shutdown
            pass
