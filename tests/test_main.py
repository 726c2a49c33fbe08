import threading

import numpy as np

from conftest import CountdownCancel, FakeClassifier

import main
from core.settings import AppSettings


class FakeVideoSource:
    """Stands in for VideoCaptureSource in headless runs."""

    def __init__(self, can_open=True):
        self.can_open = can_open
        self.source_path = None
        self.opened = False
        self.closed = False

    def open_camera(self, index=0):
        self.opened = self.can_open
        return self.opened

    def open_file(self, path):
        self.source_path = path
        self.opened = self.can_open
        return self.opened

    def is_opened(self):
        return self.opened

    def read(self):
        return True, np.zeros((8, 8, 3), dtype=np.uint8)

    def rewind(self):
        return False

    def get_fps(self):
        return 1000.0

    def close(self):
        self.opened = False
        self.closed = True


def test_headless_model_load_failure_exits_nonzero_without_inference():
    classifier = FakeClassifier(fail_load=True)
    capture = FakeVideoSource()
    status = main.run_headless(AppSettings(), classifier, CountdownCancel(5), capture=capture)
    assert status == 1
    assert classifier.calls == 0
    assert capture.closed


def test_headless_run_stops_cleanly_on_cancel():
    classifier = FakeClassifier()
    capture = FakeVideoSource()
    status = main.run_headless(AppSettings(), classifier, CountdownCancel(3), capture=capture)
    assert status == 0
    assert classifier.closed
    assert capture.closed


def test_headless_camera_open_failure():
    status = main.run_headless(AppSettings(), FakeClassifier(), CountdownCancel(1), capture=FakeVideoSource(can_open=False))
    assert status == 1


def test_cli_flags_override_settings(monkeypatch):
    monkeypatch.setenv("LIVECLS_TOP_K", "5")
    args = main.build_parser().parse_args(["--interval-ms", "20", "--tie-break", "label", "--headless"])
    settings = main.load_settings(args)
    assert settings.interval_ms == 20
    assert settings.tie_break == "label"
    assert settings.top_k == 5


def test_invalid_settings_exit_before_model_is_built(capsys):
    built = []
    status = main.main(["--top-k", "0"], classifier_factory=lambda s: built.append(s))
    assert status == 2
    assert built == []
    assert "top_k" in capsys.readouterr().err


class EndingVideoSource(FakeVideoSource):
    """A video file with a fixed number of frames."""

    def __init__(self, frames=3):
        super().__init__()
        self.remaining = frames

    def read(self):
        if self.remaining <= 0:
            return False, None
        self.remaining -= 1
        return super().read()


def test_headless_exits_when_video_ends():
    settings = AppSettings(video_path="clip.mp4", loop_video=False, interval_ms=5)
    classifier = FakeClassifier()
    result = []
    runner = threading.Thread(
        target=lambda: result.append(
            main.run_headless(settings, classifier, threading.Event(), capture=EndingVideoSource())
        ),
        daemon=True,
    )
    runner.start()
    runner.join(5.0)
    assert not runner.is_alive()
    assert result == [0]
    assert classifier.closed
