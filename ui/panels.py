"""
Right-side panels: Predictions, Logs, Performance.
"""

from __future__ import annotations

from PySide6.QtWidgets import (
    QFormLayout,
    QLabel,
    QPlainTextEdit,
    QProgressBar,
    QVBoxLayout,
    QWidget,
)

from core.models import PredictionSet


class PredictionsPanel(QWidget):
    """Top-k labels with a probability bar each, replaced on every update."""

    def __init__(self, rows: int = 3, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        self._status = QLabel("Waiting for the first prediction...")
        self._status.setStyleSheet("color: #666;")
        layout.addWidget(self._status)
        self._labels: list[QLabel] = []
        self._bars: list[QProgressBar] = []
        for _ in range(rows):
            label = QLabel("—")
            label.setStyleSheet("font-size: 15px; font-weight: bold;")
            bar = QProgressBar()
            bar.setRange(0, 1000)
            bar.setFormat("")
            layout.addWidget(label)
            layout.addWidget(bar)
            self._labels.append(label)
            self._bars.append(bar)
        layout.addStretch()

    def update_predictions(self, predictions: PredictionSet | None) -> None:
        if not predictions:
            self.reset()
            return
        self._status.setText("")
        for i, (label, bar) in enumerate(zip(self._labels, self._bars)):
            if i < len(predictions):
                p = predictions[i]
                label.setText(p.label)
                bar.setValue(int(round(p.probability * 1000)))
                bar.setFormat(f"{p.probability * 100:.1f}%")
            else:
                label.setText("—")
                bar.setValue(0)
                bar.setFormat("")

    def reset(self) -> None:
        self._status.setText("Waiting for the first prediction...")
        for label, bar in zip(self._labels, self._bars):
            label.setText("—")
            bar.setValue(0)
            bar.setFormat("")


class LogsPanel(QWidget):
    """Shows application log messages and errors."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        self._text = QPlainTextEdit(self)
        self._text.setReadOnly(True)
        self._text.setMaximumBlockCount(2000)
        layout.addWidget(self._text)

    def append(self, message: str) -> None:
        self._text.appendPlainText(message)
        # Auto-scroll to bottom
        scrollbar = self._text.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def clear(self) -> None:
        self._text.clear()


class PerformancePanel(QWidget):
    """Preview FPS, average model runtime, and capture counters."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QFormLayout(self)
        self._fps_label = QLabel("—")
        self._avg_label = QLabel("—")
        self._captured_label = QLabel("—")
        self._dropped_label = QLabel("—")
        layout.addRow("Preview FPS:", self._fps_label)
        layout.addRow("Avg model runtime:", self._avg_label)
        layout.addRow("Frames captured:", self._captured_label)
        layout.addRow("Frames skipped:", self._dropped_label)

    def update_preview(self, fps: float, captured: int, dropped: int) -> None:
        self._fps_label.setText(f"{fps:.1f}")
        self._captured_label.setText(str(captured))
        self._dropped_label.setText(str(dropped))

    def update_average(self, seconds: float) -> None:
        self._avg_label.setText(f"{seconds * 1000.0:.1f} ms")

    def reset(self) -> None:
        for w in (self._fps_label, self._avg_label, self._captured_label, self._dropped_label):
            w.setText("—")
