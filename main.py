"""
Live Classifier: entry point.
Run: python main.py            (window)
     python main.py --headless (console only)
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from typing import Callable, Sequence

# Reduce TensorFlow Lite/MediaPipe console noise (INFO and WARNING)
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")

from core.capture import CaptureWorker, FrameSource, VideoCaptureSource
from core.classifier import ClassifierBase, ModelLoadError
from core.log import setup_logging
from core.models import TIE_BREAKERS, PredictionSet
from core.preprocess import InputBuffer
from core.runner import InferenceLoop
from core.settings import AppSettings
from core.sink import PredictionSink
from core.slot import LatestFrameSlot

logger = logging.getLogger("main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Classify live camera frames with an on-device model.")
    parser.add_argument("--camera", dest="camera_index", type=int, help="Camera index (default 0)")
    parser.add_argument("--video", dest="video_path", help="Read frames from a video file instead of a camera")
    parser.add_argument("--model", dest="model_name", help="Model file name, e.g. efficientnet_lite0.tflite")
    parser.add_argument("--models-dir", dest="models_dir", help="Directory for cached model files")
    parser.add_argument("--interval-ms", dest="interval_ms", type=int, help="Pause between inferences")
    parser.add_argument("--top-k", dest="top_k", type=int, help="Number of labels to show")
    parser.add_argument("--tie-break", dest="tie_break", choices=sorted(TIE_BREAKERS),
                        help="Order of labels with equal probability")
    parser.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--headless", action="store_true", help="No window; log predictions to the console")
    return parser


def load_settings(args: argparse.Namespace) -> AppSettings:
    settings = AppSettings.from_env()
    overrides = {k: v for k, v in vars(args).items() if k != "headless"}
    settings.apply(overrides)
    settings.validate()
    return settings


def default_classifier(settings: AppSettings) -> ClassifierBase:
    from core.mediapipe_classifier import MediaPipeClassifier

    return MediaPipeClassifier(settings.model_name, settings.models_path)


def _log_predictions(predictions: PredictionSet) -> None:
    logger.info("  ".join(f"{p.label} {p.probability:.2f}" for p in predictions))


def run_headless(
    settings: AppSettings,
    classifier: ClassifierBase,
    stop_event: threading.Event | None = None,
    capture: VideoCaptureSource | None = None,
) -> int:
    """Capture + inference without a window. Returns the process exit status."""
    stop_event = stop_event or threading.Event()
    capture = capture or VideoCaptureSource()
    slot = LatestFrameSlot()
    sink = PredictionSink()
    sink.subscribe(_log_predictions)
    loop = InferenceLoop(
        classifier,
        slot,
        sink,
        input_buffer=InputBuffer(settings.input_dims),
        interval_s=settings.interval_s,
        top_k=settings.top_k,
        tie_break=settings.tie_break_key,
        latency_window=settings.latency_window,
    )

    opened = capture.open_file(settings.video_path) if settings.video_path else capture.open_camera(settings.camera_index)
    if not opened:
        logger.error("Failed to open %s", settings.video_path or f"camera {settings.camera_index}")
        return 1
    pace = capture.get_fps() if settings.video_path else None
    # When the stream ends (video over, camera gone) there is nothing left to classify
    worker = CaptureWorker(
        FrameSource(capture, loop_video=settings.loop_video),
        slot,
        pace_fps=pace,
        on_finished=stop_event.set,
    )
    worker.start()
    try:
        # Model loads on this thread: a load failure ends the run before any inference
        loop.run(stop_event)
    except ModelLoadError as e:
        logger.critical("%s", e)
        return 1
    finally:
        worker.stop()
        capture.close()
        classifier.close()
    return 0


def run_gui(settings: AppSettings, classifier: ClassifierBase) -> int:
    from PySide6.QtWidgets import QApplication

    from ui.main_window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    window = MainWindow(settings, classifier)
    window.show()
    window.start_inference()
    if settings.video_path:
        window.open_video(settings.video_path)
    return app.exec()


def main(
    argv: Sequence[str] | None = None,
    classifier_factory: Callable[[AppSettings], ClassifierBase] = default_classifier,
) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args)
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2
    setup_logging(settings.log_level)
    classifier = classifier_factory(settings)
    if args.headless:
        stop_event = threading.Event()
        signal.signal(signal.SIGINT, lambda *_: stop_event.set())
        return run_headless(settings, classifier, stop_event)
    return run_gui(settings, classifier)


if __name__ == "__main__":
    sys.exit(main())
