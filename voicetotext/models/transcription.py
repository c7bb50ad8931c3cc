"""Transcription-related data models."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

# Opaque continuation state between live chunks: the token ids the engine
# produced for the previous chunk. Empty means "no context".
TranscriptionContext = Tuple[int, ...]

EMPTY_CONTEXT: TranscriptionContext = ()


@dataclass(frozen=True)
class InferenceOptions:
    """Options for a single engine inference call."""
    language: str = "auto"
    translate: bool = False
    prompt_text: Optional[str] = None
    prompt_context: TranscriptionContext = EMPTY_CONTEXT
    live: bool = False


@dataclass
class InferenceResult:
    """Raw result of an engine inference call."""
    text: str
    context: TranscriptionContext = field(default_factory=tuple)
    processing_time: float = 0.0
    detected_language: Optional[str] = None
