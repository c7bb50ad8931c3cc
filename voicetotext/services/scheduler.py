"""Live-mode chunk scheduler: drains overlapping chunks and transcribes them in order."""

import logging
from typing import Callable

from ..audio.buffer import SampleBuffer
from ..audio.silence import SilenceCountdown, is_silent
from ..errors import EngineError
from ..models.audio import Chunk
from ..models.session import SessionSettings
from ..models.transcription import EMPTY_CONTEXT, TranscriptionContext
from ..transcription.adapter import ASRAdapter
from .ticker import PeriodicWorker

logger = logging.getLogger(__name__)


class ChunkScheduler(PeriodicWorker):
    """Periodically drains the buffer and feeds chunks to the ASR adapter.

    Runs on its own thread so inference never touches the capture thread.
    Each `transcribe_chunk` call completes before the next drain, which keeps
    chunks in arrival order and the token context sequential.

    Two continuity mechanisms work together: `overlap_samples` of raw audio
    stay in the buffer after every drain, and the token context returned by
    the engine is passed to the next call. Context is cleared on silence.
    """

    thread_name = "ChunkSchedulerThread"

    def __init__(self,
                 buffer: SampleBuffer,
                 adapter: ASRAdapter,
                 settings: SessionSettings,
                 on_text: Callable[[str], None],
                 on_error: Callable[[Exception], None],
                 on_silence_timeout: Callable[[], None]):
        """Initialize chunk scheduler.

        Args:
            buffer: Session sample buffer
            adapter: ASR adapter used for every chunk
            settings: Session settings (interval, overlap, silence, language)
            on_text: Receives each non-empty chunk transcription
            on_error: Receives per-chunk inference failures
            on_silence_timeout: Called once when consecutive silent chunks hit the timeout
        """
        super().__init__(settings.chunk_interval_seconds)
        self.buffer = buffer
        self.adapter = adapter
        self.settings = settings
        self.on_text = on_text
        self.on_error = on_error
        self.on_silence_timeout = on_silence_timeout

        self.overlap_sample_count = settings.overlap_samples
        self.context: TranscriptionContext = EMPTY_CONTEXT
        self.silence = SilenceCountdown(settings.chunk_interval_seconds, settings.silence_timeout_seconds)

        self.chunks_drained = 0
        self.chunks_transcribed = 0
        self.chunks_failed = 0
        self._resident_overlap = 0

    @property
    def consecutive_silent_chunks(self) -> int:
        return self.silence.silent_ticks

    def drain_chunk(self) -> Chunk:
        samples = self.buffer.drain(keep_last=self.overlap_sample_count)
        if len(samples) == 0:
            return Chunk(samples=samples, overlap_prefix_length=0, sequence_number=self.chunks_drained)

        chunk = Chunk(
            samples=samples,
            overlap_prefix_length=self._resident_overlap,
            sequence_number=self.chunks_drained + 1,
        )
        self.chunks_drained += 1
        self._resident_overlap = min(self.overlap_sample_count, len(samples))
        return chunk

    def tick(self) -> bool:
        """Process one chunk interval. Returns False when the loop should end."""
        chunk = self.drain_chunk()
        if len(chunk.samples) == 0:
            # Not enough new audio yet; this is not silence
            return True

        energy = chunk.mean_amplitude()
        if is_silent(energy, self.settings.silence_threshold):
            self.context = EMPTY_CONTEXT
            logger.debug(f"Chunk {chunk.sequence_number} silent (energy={energy:.5f}), "
                         f"{self.silence.silent_ticks + 1}/{self.silence.max_ticks}")
            if self.silence.observe(True):
                logger.info(f"Live session silent for {self.silence.timeout}s, stopping")
                self.on_silence_timeout()
                return False
            return True

        self.silence.observe(False)
        self.transcribe(chunk)
        return True

    def transcribe(self, chunk: Chunk) -> None:
        try:
            text, self.context = self.adapter.transcribe_chunk(
                chunk.samples,
                language=self.settings.language,
                translate=self.settings.translate,
                context=self.context,
                initial_prompt=self.settings.initial_prompt,
            )
        except EngineError as e:
            self.chunks_failed += 1
            logger.error(f"Chunk {chunk.sequence_number} failed, continuing: {e}")
            self.on_error(e)
            return

        self.chunks_transcribed += 1
        logger.info(f"Chunk {chunk.sequence_number} ({len(chunk.samples)} samples, "
                    f"{chunk.overlap_prefix_length} overlap): '{text}'")
        if text:
            self.on_text(text)
