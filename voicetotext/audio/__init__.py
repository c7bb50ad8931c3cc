"""Audio capture and processing module."""

from .buffer import SampleBuffer, REFERENCE_ENERGY, SAMPLE_RATE, compute_level
from .silence import is_silent, SilenceCountdown
from .capture import AudioCapture, request_microphone_access

__all__ = [
    'SampleBuffer',
    'REFERENCE_ENERGY',
    'SAMPLE_RATE',
    'compute_level',
    'is_silent',
    'SilenceCountdown',
    'AudioCapture',
    'request_microphone_access',
]
