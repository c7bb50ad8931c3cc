"""ASR adapter: owns the loaded model handle and the calling contract."""

import os
import logging
import threading
from typing import Any, Optional, Tuple

import numpy as np

from ..errors import EngineError, EngineInferenceFailed, ModelNotFound, ModelNotLoaded
from ..models.transcription import (
    EMPTY_CONTEXT,
    InferenceOptions,
    InferenceResult,
    TranscriptionContext,
)
from .base import AbstractTranscriptionEngine
from .cleaner import clean_transcription

logger = logging.getLogger(__name__)


class ASRAdapter:
    """Synchronous boundary to the recognition engine.

    Exactly one model handle is resident at a time. Loading, unloading and
    inference are mutually exclusive: a load requested while a transcription
    is running waits for it to finish.
    """

    def __init__(self, engine: AbstractTranscriptionEngine):
        """Initialize adapter around an engine.

        Args:
            engine: Engine implementation (faster-whisper in production, fakes in tests)
        """
        self.engine = engine
        self.lock = threading.Lock()
        self._handle: Optional[Any] = None
        self.loaded_model_path: Optional[str] = None

    @property
    def is_model_loaded(self) -> bool:
        return self._handle is not None

    def load_model(self, model_path: str) -> None:
        """Load a model, releasing any previously loaded one first.

        Loading the model that is already resident is a no-op.

        Raises:
            ModelNotFound: If nothing exists at `model_path`
            ModelLoadFailed: If the engine fails to initialise the model
        """
        with self.lock:
            if self._handle is not None and self.loaded_model_path == model_path:
                logger.debug(f"Model already loaded: {model_path}")
                return

            self._release()

            if not os.path.exists(model_path):
                raise ModelNotFound(model_path)

            self._handle = self.engine.load(model_path)
            self.loaded_model_path = model_path
            logger.info(f"Model loaded: {model_path}")

    def unload_model(self) -> None:
        with self.lock:
            self._release()

    def transcribe_once(self,
                        samples: np.ndarray,
                        language: str = "auto",
                        translate: bool = False,
                        initial_prompt: str = "") -> str:
        """One-shot transcription of a complete recording.

        Raises:
            ModelNotLoaded: If no model is loaded
            EngineInferenceFailed: If the engine call fails
        """
        options = InferenceOptions(
            language=language,
            translate=translate,
            prompt_text=initial_prompt or None,
        )
        result = self._infer(samples, options)
        return clean_transcription(result.text)

    def transcribe_chunk(self,
                         samples: np.ndarray,
                         language: str = "auto",
                         translate: bool = False,
                         context: TranscriptionContext = EMPTY_CONTEXT,
                         initial_prompt: str = "") -> Tuple[str, TranscriptionContext]:
        """Transcribe one live chunk, carrying token context forward.

        `initial_prompt` is only used while `context` is empty (first chunk,
        or first chunk after silence).

        Returns:
            Tuple of (cleaned text, context for the next chunk)
        """
        options = InferenceOptions(
            language=language,
            translate=translate,
            prompt_text=None if context else (initial_prompt or None),
            prompt_context=tuple(context),
            live=True,
        )
        result = self._infer(samples, options)
        return clean_transcription(result.text), tuple(result.context)

    def _infer(self, samples: np.ndarray, options: InferenceOptions) -> InferenceResult:
        samples = np.asarray(samples, dtype=np.float32)

        with self.lock:
            if self._handle is None:
                raise ModelNotLoaded()
            if len(samples) == 0:
                return InferenceResult(text="", context=options.prompt_context)

            try:
                return self.engine.infer(self._handle, samples, options)
            except EngineError:
                raise
            except Exception as e:
                logger.error(f"Transcription failed: {e}")
                raise EngineInferenceFailed(f"Transcription failed: {e}") from e

    def _release(self) -> None:
        # Caller holds the lock.
        if self._handle is None:
            return
        logger.info(f"Unloading model: {self.loaded_model_path}")
        handle, self._handle = self._handle, None
        self.loaded_model_path = None
        self.engine.unload(handle)
