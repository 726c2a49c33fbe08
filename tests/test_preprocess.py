import numpy as np
import pytest

from conftest import make_frame

from core.preprocess import BufferBusyError, InputBuffer


def test_render_resizes_into_fixed_size_rgb():
    buf = InputBuffer((256, 256))
    # Pure blue in BGR
    out = buf.render(make_frame(width=640, height=480, color=(255, 0, 0)))
    assert out.shape == (256, 256, 3)
    assert out.dtype == np.uint8
    assert tuple(out[128, 128]) == (0, 0, 255)


def test_render_reuses_same_array_every_call():
    buf = InputBuffer((32, 32))
    first = buf.render(make_frame(width=100, height=80))
    second = buf.render(make_frame(width=50, height=200, color=(0, 255, 0)))
    assert first is second
    assert second is buf.array
    assert tuple(second[0, 0]) == (0, 255, 0)


def test_render_rejects_non_bgr_image(frame_factory):
    frame = frame_factory()
    bad = type(frame)(image=np.zeros((10, 10), dtype=np.uint8), width=10, height=10)
    with pytest.raises(ValueError):
        InputBuffer((8, 8)).render(bad)


def test_concurrent_lease_is_refused():
    buf = InputBuffer((8, 8))
    with buf.lease():
        with pytest.raises(BufferBusyError):
            with buf.lease():
                pass
    # Released again after the first lease ends
    with buf.lease():
        pass
