"""Recording timer: elapsed seconds, level metering and batch silence auto-stop."""

import logging
from typing import Callable, Optional

from ..audio.buffer import SampleBuffer, REFERENCE_ENERGY
from ..audio.silence import SilenceCountdown, is_silent
from .ticker import PeriodicWorker

logger = logging.getLogger(__name__)


class RecordingTimer(PeriodicWorker):
    """Ticks every `tick_interval` seconds while a session records.

    When `on_silence_timeout` is given (batch mode), consecutive ticks whose
    level is under the silence threshold count down to an automatic stop.
    """

    thread_name = "RecordingTimerThread"

    def __init__(self,
                 buffer: SampleBuffer,
                 tick_interval: float = 0.2,
                 silence_threshold: float = 0.002,
                 silence_timeout: float = 10.0,
                 on_silence_timeout: Optional[Callable[[], None]] = None):
        """Initialize recording timer.

        Args:
            buffer: Buffer whose level is sampled on every tick
            tick_interval: Seconds between ticks
            silence_threshold: Mean absolute amplitude considered silence
            silence_timeout: Seconds of silence before `on_silence_timeout` fires
            on_silence_timeout: Auto-stop callback; None disables silence detection
        """
        super().__init__(tick_interval)
        self.buffer = buffer
        self.on_silence_timeout = on_silence_timeout
        self.ticks_per_second = max(1, round(1.0 / tick_interval))
        # The buffer reports normalized levels; compare like with like
        self.level_threshold = silence_threshold / REFERENCE_ENERGY
        self.countdown = SilenceCountdown(tick_interval, silence_timeout) if on_silence_timeout else None

        self.ticks = 0
        self.elapsed_seconds = 0
        self.audio_level = 0.0
        self.silence_countdown_seconds = 0

    def tick(self) -> bool:
        self.ticks += 1
        self.audio_level = self.buffer.read_level()
        if self.ticks % self.ticks_per_second == 0:
            self.elapsed_seconds += 1

        if self.countdown is None:
            return True

        if self.countdown.observe(is_silent(self.audio_level, self.level_threshold)):
            self.silence_countdown_seconds = 0
            logger.info(f"Batch recording silent for {self.countdown.timeout}s, stopping")
            self.on_silence_timeout()
            return False

        if self.countdown.counting:
            self.silence_countdown_seconds = self.countdown.remaining_seconds_before_stop()
        else:
            self.silence_countdown_seconds = 0
        return True
