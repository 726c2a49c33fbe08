"""
Shared data models: captured frames and top-k predictions.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

import numpy as np

# Key applied to (label, probability) before the stable probability sort.
TieBreak = Callable[[tuple[str, float]], Any]

# Named tie-break orders for labels with equal probability.
TIE_BREAKERS: dict[str, TieBreak | None] = {
    "insertion": None,  # keep the model's output order
    "label": lambda item: item[0],
}


@dataclass(frozen=True)
class Frame:
    """One captured image with its metadata. Treat `image` as read-only."""

    image: np.ndarray
    width: int
    height: int
    pixel_format: str = "BGR"
    timestamp_s: float = field(default_factory=time.monotonic)
    index: int = 0

    @classmethod
    def from_image(cls, image: np.ndarray, index: int = 0, pixel_format: str = "BGR") -> Frame:
        h, w = image.shape[:2]
        return cls(image=image, width=w, height=h, pixel_format=pixel_format, index=index)


@dataclass(frozen=True)
class Prediction:
    label: str
    probability: float


# Ordered by probability, highest first.
PredictionSet = tuple[Prediction, ...]


def top_predictions(
    scores: Mapping[str, float],
    k: int = 3,
    tie_break: TieBreak | None = None,
) -> PredictionSet:
    """
    Return the k highest-probability entries of a label -> probability mapping.

    The probability sort is stable, so labels with equal probability keep the
    order produced by `tie_break` (or the mapping's own order when None).
    """
    items: Iterable[tuple[str, float]] = ((str(lbl), float(p)) for lbl, p in scores.items())
    if tie_break is not None:
        items = sorted(items, key=tie_break)
    ranked = sorted(items, key=lambda item: item[1], reverse=True)
    return tuple(Prediction(label, prob) for label, prob in ranked[: max(k, 0)])


def predictions_to_dict(predictions: PredictionSet | None) -> list[dict[str, Any]]:
    """Plain list form for JSON export."""
    if not predictions:
        return []
    return [{"label": p.label, "probability": p.probability} for p in predictions]
