"""Storage for transcription history and model files."""

from .history_store import HistoryStore
from .model_store import ModelStore, KNOWN_MODELS

__all__ = [
    "HistoryStore",
    "ModelStore",
    "KNOWN_MODELS",
]
