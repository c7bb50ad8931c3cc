"""Model file store: where converted Whisper models live on disk."""

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

# Whisper checkpoints published in CTranslate2 format for faster-whisper.
KNOWN_MODELS = (
    "tiny",
    "tiny.en",
    "base",
    "base.en",
    "small",
    "small.en",
    "medium",
    "medium.en",
    "large-v1",
    "large-v2",
    "large-v3",
    "large-v3-turbo",
    "distil-large-v3",
)


class ModelStore:
    """Resolves model names to `<data_dir>/models/<model-name>`.

    Downloading and removing models is someone else's job; the store only
    answers whether a model is present and where.
    """

    MODEL_WEIGHTS_FILE = "model.bin"

    def __init__(self, data_dir: str = "./data"):
        self.models_dir = Path(data_dir) / "models"
        self.models_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"ModelStore using {self.models_dir}")

    def path_for(self, model_name: str) -> Path:
        return self.models_dir / model_name

    def is_available(self, model_name: str) -> bool:
        return (self.path_for(model_name) / self.MODEL_WEIGHTS_FILE).exists()

    def list_available(self) -> List[str]:
        """Names of all models with weights present, sorted."""
        return sorted(
            path.name for path in self.models_dir.iterdir()
            if path.is_dir() and (path / self.MODEL_WEIGHTS_FILE).exists()
        )
