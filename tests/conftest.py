"""Shared pytest fixtures: fake classifier, frame factory, cancellation helper."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.classifier import ClassifierBase, ModelLoadError  # noqa: E402
from core.models import Frame  # noqa: E402


class FakeClassifier(ClassifierBase):
    """Returns canned scores; can be told to fail loading or individual calls."""

    name = "fake"

    def __init__(self, scores=None, fail_load=False, fail_calls=()):
        self.scores = scores if scores is not None else {"cat": 0.7, "dog": 0.2, "bird": 0.1}
        self.fail_load = fail_load
        self.fail_calls = set(fail_calls)
        self.loaded = False
        self.closed = False
        self.calls = 0
        self.inputs = []

    def load(self):
        if self.fail_load:
            raise ModelLoadError("model file missing")
        self.loaded = True

    def classify(self, image_rgb):
        self.calls += 1
        self.inputs.append(image_rgb.shape)
        if self.calls in self.fail_calls:
            raise RuntimeError("transient model error")
        return dict(self.scores)

    def close(self):
        self.closed = True


class CountdownCancel:
    """Stands in for threading.Event: reports set after `iterations` waits, never sleeps."""

    def __init__(self, iterations):
        self.remaining = iterations
        self.waits = []

    def is_set(self):
        return self.remaining <= 0

    def wait(self, timeout=None):
        self.waits.append(timeout)
        self.remaining -= 1
        return self.is_set()

    def set(self):
        self.remaining = 0


def make_frame(width=64, height=48, color=(255, 0, 0), index=0):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return Frame.from_image(image, index=index)


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def frame_factory():
    return make_frame
