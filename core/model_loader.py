"""
Ensures MediaPipe image classifier .tflite files exist; downloads from Google storage if missing.
"""

from __future__ import annotations

import logging
import urllib.request
from pathlib import Path

logger = logging.getLogger(__name__)

# Default cache directory (next to project root)
DEFAULT_MODELS_DIR = Path(__file__).resolve().parent.parent / "models"

# Official MediaPipe image classifier URLs (Google storage)
_MODEL_URLS = {
    "efficientnet_lite0.tflite": "https://storage.googleapis.com/mediapipe-models/image_classifier/efficientnet_lite0/float32/1/efficientnet_lite0.tflite",
    "efficientnet_lite2.tflite": "https://storage.googleapis.com/mediapipe-models/image_classifier/efficientnet_lite2/float32/1/efficientnet_lite2.tflite",
}


def known_models() -> list[str]:
    return sorted(_MODEL_URLS)


def get_model_path(filename: str, models_dir: str | Path | None = None) -> Path:
    """Return path to the model file; download if not present."""
    directory = Path(models_dir) if models_dir is not None else DEFAULT_MODELS_DIR
    path = directory / filename
    if path.is_file():
        return path
    url = _MODEL_URLS.get(filename)
    if not url:
        raise FileNotFoundError(f"Unknown model: {filename}. Known: {known_models()}")
    directory.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s to %s", filename, path)
    # Only a complete download may appear under the final name
    partial = path.with_name(path.name + ".part")
    try:
        urllib.request.urlretrieve(url, partial)
        partial.replace(path)
    finally:
        partial.unlink(missing_ok=True)
    return path
