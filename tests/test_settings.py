import pytest

from core.models import TIE_BREAKERS
from core.settings import AppSettings


def test_defaults():
    s = AppSettings()
    assert s.input_dims == (256, 256)
    assert s.interval_s == pytest.approx(0.05)
    assert s.top_k == 3
    assert s.latency_window == 100
    assert s.tie_break_key is TIE_BREAKERS["insertion"]
    s.validate()


def test_environment_overrides():
    s = AppSettings.from_env({
        "LIVECLS_INTERVAL_MS": "100",
        "LIVECLS_TOP_K": "5",
        "LIVECLS_LOOP_VIDEO": "no",
        "LIVECLS_TIE_BREAK": "label",
        "UNRELATED": "x",
    })
    assert s.interval_ms == 100
    assert s.top_k == 5
    assert s.loop_video is False
    assert s.tie_break == "label"


def test_apply_ignores_none_and_rejects_unknown():
    s = AppSettings()
    s.apply({"camera_index": None, "top_k": "2"})
    assert s.camera_index == 0
    assert s.top_k == 2
    with pytest.raises(ValueError):
        s.apply({"frobnicate": 1})


@pytest.mark.parametrize("field,value", [
    ("top_k", 0),
    ("interval_ms", -1),
    ("input_size", 0),
    ("latency_window", 0),
    ("tie_break", "random"),
    ("log_level", "LOUD"),
])
def test_validate_rejects_bad_values(field, value):
    s = AppSettings()
    setattr(s, field, value)
    with pytest.raises(ValueError):
        s.validate()
