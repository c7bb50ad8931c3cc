"""Conversion of raw capture frames to mono 16 kHz float32 samples."""

from math import gcd

import numpy as np
from scipy.signal import resample_poly


def pcm16_to_float32(data: bytes) -> np.ndarray:
    """Convert little-endian 16-bit PCM bytes to float32 in [-1, 1)."""
    pcm = np.frombuffer(data, dtype=np.int16)
    return pcm.astype(np.float32) / 32768.0


def downmix(samples: np.ndarray, channels: int) -> np.ndarray:
    """Average interleaved channels into a single mono channel."""
    if channels <= 1:
        return samples
    usable = len(samples) - (len(samples) % channels)
    frames = samples[:usable].reshape(-1, channels)
    return frames.mean(axis=1).astype(np.float32)


def resample(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """Resample with a polyphase filter; a no-op when the rates match."""
    if from_rate == to_rate or len(samples) == 0:
        return samples
    divisor = gcd(int(from_rate), int(to_rate))
    up = int(to_rate) // divisor
    down = int(from_rate) // divisor
    return resample_poly(samples, up, down).astype(np.float32)


def to_mono_16k(data: bytes, channels: int, sample_rate: int, target_rate: int = 16000) -> np.ndarray:
    """Full conversion of one captured PCM16 frame."""
    samples = pcm16_to_float32(data)
    samples = downmix(samples, channels)
    return resample(samples, sample_rate, target_rate)
