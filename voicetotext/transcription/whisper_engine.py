"""faster-whisper implementation of the ASR engine boundary."""

import os
import time
import logging
from typing import Optional

import numpy as np
from faster_whisper import WhisperModel

from ..errors import ModelLoadFailed
from ..models.transcription import InferenceOptions, InferenceResult
from .base import AbstractTranscriptionEngine

logger = logging.getLogger(__name__)


class FasterWhisperEngine(AbstractTranscriptionEngine):
    """Runs Whisper models converted to CTranslate2 via faster-whisper."""

    def __init__(self,
                 device: str = "auto",
                 compute_type: str = "default",
                 beam_size: int = 5,
                 cpu_threads: Optional[int] = None):
        """Initialize engine settings; no model is loaded yet.

        Args:
            device: "cpu", "cuda" or "auto"
            compute_type: CTranslate2 compute type (e.g. "int8", "float16")
            beam_size: Beam size for batch transcriptions (live chunks use greedy decoding)
            cpu_threads: Inference threads (None = half the available cores)
        """
        self.device = device
        self.compute_type = compute_type
        self.beam_size = beam_size
        self.cpu_threads = cpu_threads or max(1, (os.cpu_count() or 2) // 2)

    def load(self, model_path: str) -> WhisperModel:
        logger.info(f"Loading faster-whisper model from {model_path} "
                    f"(device={self.device}, compute_type={self.compute_type})")
        try:
            return WhisperModel(
                model_path,
                device=self.device,
                compute_type=self.compute_type,
                cpu_threads=self.cpu_threads,
            )
        except (RuntimeError, ValueError, OSError) as e:
            raise ModelLoadFailed(f"Failed to initialize whisper model: {e}") from e

    def unload(self, handle: WhisperModel) -> None:
        handle.model.unload_model()
        logger.info("faster-whisper model unloaded")

    def infer(self, handle: WhisperModel, samples: np.ndarray, options: InferenceOptions) -> InferenceResult:
        start_time = time.time()

        # Token context supersedes the free-text prompt
        if options.prompt_context:
            initial_prompt = list(options.prompt_context)
        else:
            initial_prompt = options.prompt_text or None

        segments, info = handle.transcribe(
            samples,
            language=None if options.language == "auto" else options.language,
            task="translate" if options.translate else "transcribe",
            beam_size=1 if options.live else self.beam_size,
            initial_prompt=initial_prompt,
            condition_on_previous_text=False,
            without_timestamps=options.live,
        )

        texts = []
        tokens = []
        # segments is a generator; decoding happens while iterating
        for segment in segments:
            texts.append(segment.text)
            tokens.extend(segment.tokens)

        processing_time = time.time() - start_time
        logger.debug(f"Inference over {len(samples)} samples took {processing_time:.2f}s "
                     f"({len(tokens)} tokens, language={info.language})")

        return InferenceResult(
            text="".join(texts),
            context=tuple(tokens),
            processing_time=processing_time,
            detected_language=info.language,
        )
