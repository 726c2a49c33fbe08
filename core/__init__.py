# Core: capture, slot, preprocessing, classifier, inference loop, prediction sink

from core.capture import CaptureWorker, FrameSource, VideoCaptureSource
from core.models import Frame, Prediction, PredictionSet, top_predictions
from core.runner import InferenceLoop, LoopState
from core.sink import PredictionSink
from core.slot import LatestFrameSlot

__all__ = [
    "CaptureWorker",
    "Frame",
    "FrameSource",
    "InferenceLoop",
    "LatestFrameSlot",
    "LoopState",
    "Prediction",
    "PredictionSet",
    "PredictionSink",
    "VideoCaptureSource",
    "top_predictions",
]
