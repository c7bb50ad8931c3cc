"""Abstract base class for ASR engines."""

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from ..models.transcription import InferenceOptions, InferenceResult


class AbstractTranscriptionEngine(ABC):
    """Boundary to an already-trained speech recognition engine.

    Implementations are not required to be thread-safe; the adapter
    serialises every call.
    """

    @abstractmethod
    def load(self, model_path: str) -> Any:
        """Load a model and return an opaque handle.

        Raises:
            ModelLoadFailed: If the engine cannot initialise the model
        """
        pass

    @abstractmethod
    def unload(self, handle: Any) -> None:
        """Release a handle returned by `load`."""
        pass

    @abstractmethod
    def infer(self, handle: Any, samples: np.ndarray, options: InferenceOptions) -> InferenceResult:
        """Run recognition over mono 16 kHz float32 samples."""
        pass
