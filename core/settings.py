"""
Application settings. Defaults below, overridable via LIVECLS_<FIELD>
environment variables (e.g. LIVECLS_INTERVAL_MS=100) and then by CLI flags.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from core.model_loader import DEFAULT_MODELS_DIR
from core.models import TIE_BREAKERS, TieBreak

ENV_PREFIX = "LIVECLS_"

_FIELD_TYPES = {
    "camera_index": int,
    "video_path": str,
    "loop_video": lambda v: str(v).strip().lower() in ("1", "true", "yes", "on"),
    "model_name": str,
    "models_dir": str,
    "input_size": int,
    "interval_ms": int,
    "top_k": int,
    "latency_window": int,
    "tie_break": str,
    "preview_interval_ms": int,
    "log_level": str,
}


@dataclass
class AppSettings:
    camera_index: int = 0
    video_path: str | None = None
    loop_video: bool = True
    model_name: str = "efficientnet_lite0.tflite"
    models_dir: str = field(default_factory=lambda: str(DEFAULT_MODELS_DIR))
    input_size: int = 256
    interval_ms: int = 50
    top_k: int = 3
    latency_window: int = 100
    tie_break: str = "insertion"
    preview_interval_ms: int = 33
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppSettings:
        settings = cls()
        settings.apply(_env_overrides(os.environ if environ is None else environ))
        return settings

    def apply(self, overrides: Mapping[str, Any]) -> None:
        """Set fields from a mapping; None values are ignored."""
        known = {f.name for f in fields(self)}
        for name, value in overrides.items():
            if value is None:
                continue
            if name not in known:
                raise ValueError(f"Unknown setting: {name}")
            setattr(self, name, _FIELD_TYPES[name](value))

    def validate(self) -> None:
        if self.input_size < 1:
            raise ValueError("input_size must be positive")
        if self.interval_ms < 0:
            raise ValueError("interval_ms must not be negative")
        if self.top_k < 1:
            raise ValueError("top_k must be at least 1")
        if self.latency_window < 1:
            raise ValueError("latency_window must be at least 1")
        if self.tie_break not in TIE_BREAKERS:
            raise ValueError(f"tie_break must be one of {sorted(TIE_BREAKERS)}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def input_dims(self) -> tuple[int, int]:
        return self.input_size, self.input_size

    @property
    def tie_break_key(self) -> TieBreak | None:
        return TIE_BREAKERS[self.tie_break]

    @property
    def models_path(self) -> Path:
        return Path(self.models_dir)


def _env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for name in _FIELD_TYPES:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            out[name] = value
    return out
