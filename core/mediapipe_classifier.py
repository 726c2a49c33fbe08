"""
MediaPipe Tasks image classifier (EfficientNet-Lite, ImageNet labels).
"""

from __future__ import annotations

from pathlib import Path

import mediapipe as mp
import numpy as np

from core.classifier import ClassifierBase, ModelLoadError
from core.model_loader import get_model_path


class MediaPipeClassifier(ClassifierBase):
    """ImageClassifier in IMAGE running mode; scores every category of the first head."""

    def __init__(
        self,
        model_name: str = "efficientnet_lite0.tflite",
        models_dir: str | Path | None = None,
    ) -> None:
        self.name = model_name
        self._models_dir = models_dir
        self._classifier: mp.tasks.vision.ImageClassifier | None = None

    def load(self) -> None:
        self.close()
        try:
            model_path = str(get_model_path(self.name, self._models_dir))
            base_options = mp.tasks.BaseOptions(model_asset_path=model_path)
            options = mp.tasks.vision.ImageClassifierOptions(
                base_options=base_options,
                running_mode=mp.tasks.vision.RunningMode.IMAGE,
            )
            self._classifier = mp.tasks.vision.ImageClassifier.create_from_options(options)
        except (OSError, RuntimeError, ValueError) as e:
            raise ModelLoadError(f"Failed to load {self.name}: {e}") from e

    def classify(self, image_rgb: np.ndarray) -> dict[str, float]:
        if self._classifier is None:
            raise RuntimeError("classifier not loaded")
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image_rgb)
        result = self._classifier.classify(mp_image)
        scores: dict[str, float] = {}
        if result.classifications:
            for category in result.classifications[0].categories:
                label = category.category_name or category.display_name or str(category.index)
                # ImageNet repeats a few names ("crane", "maillot"); keep the best score
                score = float(category.score or 0.0)
                scores[label] = max(score, scores.get(label, 0.0))
        return scores

    def close(self) -> None:
        if self._classifier is not None:
            self._classifier.close()
            self._classifier = None
