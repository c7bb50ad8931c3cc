"""Data models for the voicetotext application."""

from .audio import Chunk
from .session import SessionMode, SessionStatus, SessionSnapshot, SessionSettings
from .events import SessionEvent, TranscriptionEvent
from .transcription import (
    TranscriptionContext,
    EMPTY_CONTEXT,
    InferenceOptions,
    InferenceResult,
)
from .history import (
    TranscriptionEntry,
    TranscriptionStats,
    ReplacementRule,
    default_replacement_rules,
)

__all__ = [
    "Chunk",
    "SessionMode",
    "SessionStatus",
    "SessionSnapshot",
    "SessionSettings",
    "SessionEvent",
    "TranscriptionEvent",
    "TranscriptionContext",
    "EMPTY_CONTEXT",
    "InferenceOptions",
    "InferenceResult",
    "TranscriptionEntry",
    "TranscriptionStats",
    "ReplacementRule",
    "default_replacement_rules",
]
