"""
Interface for the image classification model the inference loop calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class ModelLoadError(RuntimeError):
    """The model file could not be fetched or opened. Fatal for the app."""


class ClassifierBase(ABC):
    """Interface for classifiers. Subclass and implement all methods."""

    name: str = ""

    @abstractmethod
    def load(self) -> None:
        """Load the model. Raise ModelLoadError on failure."""
        ...

    @abstractmethod
    def classify(self, image_rgb: np.ndarray) -> dict[str, float]:
        """
        Classify one fixed-size RGB image.
        Returns a label -> probability mapping (values in [0, 1]).
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the model."""
        ...
