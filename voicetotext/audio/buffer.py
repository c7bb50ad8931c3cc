"""Thread-safe sample buffer shared by the capture thread and the session."""

import logging
import threading
from typing import List

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000

# Mean absolute amplitude treated as "full scale" for level metering.
REFERENCE_ENERGY = 0.05


def compute_level(block: np.ndarray) -> float:
    """Normalized energy level (0.0-1.0) of a block of float samples."""
    if len(block) == 0:
        return 0.0
    average = float(np.mean(np.abs(block)))
    return min(average / REFERENCE_ENERGY, 1.0)


def ms_to_samples(milliseconds: int, sample_rate: int = SAMPLE_RATE) -> int:
    return int(milliseconds * sample_rate // 1000)


class SampleBuffer:
    """Accumulates mono 16 kHz float32 samples plus a rolling energy level.

    One producer (the capture thread) appends, one consumer drains. A single
    lock protects both the samples and the level; it is only held for list
    manipulation and never across an inference call.
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        """Initialize an empty buffer.

        Args:
            sample_rate: Sample rate of the stored audio, used for durations
        """
        self.sample_rate = sample_rate
        self.lock = threading.Lock()
        self._blocks: List[np.ndarray] = []
        self._count = 0
        self._current_level = 0.0

    def append(self, block) -> None:
        """Append a block of samples and recompute the level from it alone."""
        block = np.asarray(block, dtype=np.float32).reshape(-1)
        level = compute_level(block)

        with self.lock:
            self._current_level = level
            if len(block):
                self._blocks.append(block)
                self._count += len(block)

    def drain(self, keep_last: int) -> np.ndarray:
        """Return everything buffered, keeping the last `keep_last` samples.

        Returns an empty array (and leaves the buffer untouched) while the
        buffer holds `keep_last` samples or fewer: there is no new audio yet.
        """
        if keep_last < 0:
            raise ValueError(f"keep_last must be >= 0, got {keep_last}")

        with self.lock:
            if self._count <= keep_last:
                return np.empty(0, dtype=np.float32)

            drained = self._concatenate()
            if keep_last > 0:
                tail = drained[-keep_last:].copy()
                self._blocks = [tail]
                self._count = len(tail)
            else:
                self._blocks = []
                self._count = 0

        logger.debug(f"Drained {len(drained)} samples, kept {keep_last} for overlap")
        return drained

    def take_all(self) -> np.ndarray:
        """Return everything buffered and leave the buffer empty."""
        with self.lock:
            samples = self._concatenate()
            self._blocks = []
            self._count = 0
        return samples

    def read_level(self) -> float:
        with self.lock:
            return self._current_level

    def duration_seconds(self) -> float:
        with self.lock:
            return self._count / self.sample_rate

    def clear(self) -> None:
        """Drop all samples and reset the level."""
        with self.lock:
            self._blocks = []
            self._count = 0
            self._current_level = 0.0

    def __len__(self) -> int:
        with self.lock:
            return self._count

    def _concatenate(self) -> np.ndarray:
        # Caller holds the lock.
        if not self._blocks:
            return np.empty(0, dtype=np.float32)
        if len(self._blocks) == 1:
            return self._blocks[0]
        return np.concatenate(self._blocks)
