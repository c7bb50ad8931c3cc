"""Audio-related data models."""

from dataclasses import dataclass

import numpy as np


@dataclass
class Chunk:
    """A contiguous slice of samples handed to the ASR engine in one call."""
    samples: np.ndarray
    overlap_prefix_length: int  # Leading samples retained from the previous drain
    sequence_number: int

    @property
    def new_sample_count(self) -> int:
        return len(self.samples) - self.overlap_prefix_length

    def mean_amplitude(self) -> float:
        if len(self.samples) == 0:
            return 0.0
        return float(np.mean(np.abs(self.samples)))
