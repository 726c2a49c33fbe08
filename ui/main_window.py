"""
Main window: left sidebar (camera, open video, start/stop), center live preview,
right tabs (Predictions, Logs, Performance, Export).
"""

from __future__ import annotations

import json
import logging

import cv2
from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from core.capture import CaptureWorker, FrameSource, VideoCaptureSource, list_cameras
from core.classifier import ClassifierBase
from core.models import Frame, PredictionSet, predictions_to_dict
from core.preprocess import InputBuffer
from core.runner import InferenceLoop
from core.settings import AppSettings
from core.sink import PredictionSink
from core.slot import LatestFrameSlot
from core.utils import FPSCounter
from ui.bridge import PredictionBridge, QtLogHandler
from ui.panels import LogsPanel, PerformancePanel, PredictionsPanel

logger = logging.getLogger(__name__)


class MainWindow(QWidget):
    """Main application window: camera preview plus live top-k predictions."""

    # Emitted from the inference thread when the model cannot be loaded
    fatal_error = Signal(str)

    def __init__(self, settings: AppSettings, classifier: ClassifierBase) -> None:
        super().__init__()
        self.setWindowTitle(f"Live Classifier ({classifier.name})")
        self._settings = settings
        self._capture = VideoCaptureSource()
        self._capture_worker: CaptureWorker | None = None
        self._slot = LatestFrameSlot()
        self._sink = PredictionSink()
        self._bridge = PredictionBridge(self._sink, self)
        self._loop = InferenceLoop(
            classifier,
            self._slot,
            self._sink,
            input_buffer=InputBuffer(settings.input_dims),
            interval_s=settings.interval_s,
            top_k=settings.top_k,
            tie_break=settings.tie_break_key,
            latency_window=settings.latency_window,
            on_average=self._bridge.report_average,
            on_fatal=lambda e: self.fatal_error.emit(str(e)),
        )
        self._classifier = classifier
        self._fps_counter = FPSCounter()
        self._last_shown_index: int | None = None
        self._current_frame: Frame | None = None

        layout = QHBoxLayout(self)
        # --- Left sidebar ---
        sidebar = QWidget()
        sidebar_layout = QVBoxLayout(sidebar)
        sidebar_layout.addWidget(QLabel("Input"))
        input_hint = QLabel("Select a camera by name, or open a video file.")
        input_hint.setWordWrap(True)
        input_hint.setStyleSheet("color: #666; font-size: 11px;")
        sidebar_layout.addWidget(input_hint)
        self._camera_combo = QComboBox()
        self._camera_combo.setToolTip("Select the camera to use.")
        sidebar_layout.addWidget(self._camera_combo)
        refresh_cam_btn = QPushButton("Refresh cameras")
        refresh_cam_btn.setToolTip("Re-detect connected cameras.")
        refresh_cam_btn.clicked.connect(self._refresh_cameras)
        sidebar_layout.addWidget(refresh_cam_btn)
        self._open_video_btn = QPushButton("Open Video")
        self._open_video_btn.setToolTip("Use a video file instead of the camera.")
        self._open_video_btn.clicked.connect(self._on_open_video)
        sidebar_layout.addWidget(self._open_video_btn)
        self._start_stop_btn = QPushButton("Start")
        self._start_stop_btn.clicked.connect(self._on_start_stop)
        sidebar_layout.addWidget(self._start_stop_btn)
        sidebar_layout.addStretch()
        layout.addWidget(sidebar)

        # --- Center: preview ---
        self._video_label = QLabel()
        self._video_label.setMinimumSize(640, 480)
        self._video_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._video_label.setStyleSheet("background-color: #1e1e1e; color: #888;")
        self._video_label.setText("No video")
        layout.addWidget(self._video_label, stretch=1)

        # --- Right: tabs ---
        tabs = QTabWidget()
        self._predictions_panel = PredictionsPanel(rows=settings.top_k)
        tabs.addTab(self._predictions_panel, "Predictions")
        self._logs_panel = LogsPanel()
        tabs.addTab(self._logs_panel, "Logs")
        self._performance_panel = PerformancePanel()
        tabs.addTab(self._performance_panel, "Performance")
        export_panel = QWidget()
        export_layout = QVBoxLayout(export_panel)
        save_frame_btn = QPushButton("Save Frame (PNG)")
        save_frame_btn.clicked.connect(self._on_save_frame)
        save_json_btn = QPushButton("Save Predictions JSON")
        save_json_btn.clicked.connect(self._on_save_json)
        export_layout.addWidget(save_frame_btn)
        export_layout.addWidget(save_json_btn)
        export_layout.addStretch()
        tabs.addTab(export_panel, "Export")
        layout.addWidget(tabs)

        self._log_handler = QtLogHandler()
        self._log_handler.signals.record_emitted.connect(self._logs_panel.append)
        logging.getLogger().addHandler(self._log_handler)

        self._bridge.predictions_changed.connect(self._on_predictions)
        self._bridge.average_latency.connect(self._performance_panel.update_average)
        self.fatal_error.connect(self._on_fatal_error)

        self._preview_timer = QTimer(self)
        self._preview_timer.setInterval(settings.preview_interval_ms)
        self._preview_timer.timeout.connect(self._refresh_preview)

        self._refresh_cameras()
        self.resize(1200, 700)

    def start_inference(self) -> None:
        """Load the model and start the inference loop in the background."""
        self._loop.start()

    def _refresh_cameras(self) -> None:
        """Populate camera combo with (index, name) from list_cameras()."""
        cameras = list_cameras()
        self._camera_combo.clear()
        for index, name in cameras:
            self._camera_combo.addItem(name, index)
        if not cameras:
            self._camera_combo.addItem("No cameras found", 0)
            logger.warning("No cameras detected. Connect a camera and click Refresh cameras.")
            return
        pos = self._camera_combo.findData(self._settings.camera_index)
        if pos >= 0:
            self._camera_combo.setCurrentIndex(pos)

    def _on_open_video(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Video", "", "Video (*.mp4 *.avi *.mov *.mkv);;All (*)"
        )
        if not path:
            return
        self.open_video(path)

    def open_video(self, path: str) -> bool:
        self._stop_capture()
        if self._capture.open_file(path):
            logger.info("Opened video: %s", path)
            self._start_capture()
            return True
        logger.error("Failed to open video: %s", path)
        return False

    def _on_start_stop(self) -> None:
        if self._capture_worker is not None:
            self._stop_capture()
            return
        if not self._capture.is_opened():
            cam_index = self._camera_combo.currentData()
            if cam_index is None:
                cam_index = 0
            cam_name = self._camera_combo.currentText()
            if not self._capture.open_camera(cam_index):
                logger.error("Failed to open camera: %r (index %d).", cam_name, cam_index)
                return
            logger.info("Opened camera: %s (index %d).", cam_name, cam_index)
        self._start_capture()

    def _start_capture(self) -> None:
        pace = self._capture.get_fps() if self._capture.source_path else None
        source = FrameSource(self._capture, loop_video=self._settings.loop_video)
        self._capture_worker = CaptureWorker(source, self._slot, pace_fps=pace)
        self._capture_worker.start()
        self._fps_counter.reset()
        self._preview_timer.start()
        self._start_stop_btn.setText("Stop")

    def _stop_capture(self) -> None:
        self._preview_timer.stop()
        if self._capture_worker is not None:
            self._capture_worker.stop()
            self._capture_worker = None
        self._capture.close()
        self._slot.clear()
        self._last_shown_index = None
        self._start_stop_btn.setText("Start")
        self._performance_panel.reset()

    @Slot()
    def _refresh_preview(self) -> None:
        if self._capture_worker is not None and not self._capture_worker.is_alive():
            self._stop_capture()
            return
        frame = self._slot.read_latest()
        if frame is None or frame.index == self._last_shown_index:
            return
        self._last_shown_index = frame.index
        self._current_frame = frame
        fps = self._fps_counter.tick()
        self._performance_panel.update_preview(fps, self._slot.written, self._slot.dropped)
        qimg = QImage(
            frame.image.data,
            frame.width,
            frame.height,
            frame.image.strides[0],
            QImage.Format.Format_BGR888,
        )
        self._video_label.setPixmap(QPixmap.fromImage(qimg).scaled(
            self._video_label.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))

    @Slot(object)
    def _on_predictions(self, predictions: PredictionSet) -> None:
        self._predictions_panel.update_predictions(predictions)

    @Slot(str)
    def _on_fatal_error(self, message: str) -> None:
        QMessageBox.critical(self, "Model failed to load", message)
        QApplication.exit(1)

    def _on_save_frame(self) -> None:
        if self._current_frame is None:
            logger.info("No frame to save.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Save Frame", "", "PNG (*.png);;All (*)")
        if not path:
            return
        if cv2.imwrite(path, self._current_frame.image):
            logger.info("Saved frame: %s", path)
        else:
            logger.error("Failed to save: %s", path)

    def _on_save_json(self) -> None:
        predictions = self._sink.current()
        if not predictions:
            logger.info("No predictions to save.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Save Predictions JSON", "", "JSON (*.json);;All (*)")
        if not path:
            return
        try:
            with open(path, "w") as f:
                json.dump({"model": self._classifier.name, "predictions": predictions_to_dict(predictions)}, f, indent=2)
            logger.info("Saved predictions: %s", path)
        except OSError as e:
            logger.error("Failed to save JSON: %s", e)

    def closeEvent(self, event) -> None:
        self._stop_capture()
        self._loop.stop()
        self._classifier.close()
        self._bridge.detach()
        logging.getLogger().removeHandler(self._log_handler)
        event.accept()
