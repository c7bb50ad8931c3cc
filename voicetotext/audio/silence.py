"""Silence detection: a pure threshold check plus a consecutive-silence countdown."""

import math
import logging

logger = logging.getLogger(__name__)


def is_silent(level: float, threshold: float) -> bool:
    return level < threshold


class SilenceCountdown:
    """Counts consecutive silent ticks and signals when the timeout is reached.

    Used by both the batch recording timer (fixed ~200 ms tick) and the live
    chunk scheduler (one tick per chunk interval).
    """

    def __init__(self, tick_interval: float, timeout: float):
        """Initialize the countdown.

        Args:
            tick_interval: Seconds between observations
            timeout: Seconds of consecutive silence before stopping
        """
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        self.tick_interval = tick_interval
        self.timeout = timeout
        # Rounding guards against 10 / 0.2 landing just above 50.
        self.max_ticks = max(1, math.ceil(round(timeout / tick_interval, 9)))
        self.silent_ticks = 0

    @property
    def counting(self) -> bool:
        return self.silent_ticks > 0

    def observe(self, silent: bool) -> bool:
        """Record one tick. Returns True when the session should stop."""
        if not silent:
            self.silent_ticks = 0
            return False

        self.silent_ticks += 1
        if self.silent_ticks >= self.max_ticks:
            logger.info(f"Silence timeout reached after {self.silent_ticks} silent ticks "
                        f"({self.timeout}s)")
            return True
        return False

    def remaining_seconds_before_stop(self) -> int:
        remaining_ticks = max(0, self.max_ticks - self.silent_ticks)
        return math.ceil(round(remaining_ticks * self.tick_interval, 9))

    def reset(self) -> None:
        self.silent_ticks = 0
