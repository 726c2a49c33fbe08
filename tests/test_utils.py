import pytest

from core.utils import FPSCounter, LatencyWindow, RollingAverage, format_ms


def test_latency_window_returns_mean_on_every_hundredth_sample():
    window = LatencyWindow(100)
    results = [window.add(0.01 * (i % 2 + 1)) for i in range(200)]
    reported = [(i, r) for i, r in enumerate(results) if r is not None]
    assert [i for i, _ in reported] == [99, 199]
    assert reported[0][1] == pytest.approx(0.015)
    assert window.count == 0


def test_latency_window_never_exceeds_capacity():
    window = LatencyWindow(3)
    for _ in range(10):
        window.add(1.0)
        assert window.count < 3


def test_latency_window_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LatencyWindow(0)


def test_rolling_average():
    avg = RollingAverage(maxlen=2)
    assert avg.average == 0.0
    for v in (1.0, 2.0, 4.0):
        avg.add(v)
    assert avg.average == 3.0


def test_fps_counter_starts_at_zero():
    counter = FPSCounter()
    assert counter.tick() == 0.0
    assert counter.tick() > 0.0
    counter.reset()
    assert counter.fps == 0.0


def test_format_ms():
    assert format_ms(0.0123) == "12.3 ms"
