"""Session-related data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..audio.buffer import ms_to_samples


class SessionMode(Enum):
    """How a session turns audio into text."""
    BATCH = "batch"
    LIVE = "live"


class SessionStatus(Enum):
    """Status of the (single) recording session."""
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in (SessionStatus.RECORDING, SessionStatus.TRANSCRIBING)


@dataclass
class SessionSnapshot:
    """Point-in-time view of the session for display purposes."""
    mode: SessionMode
    status: SessionStatus
    elapsed_seconds: int = 0
    silence_countdown_seconds: int = 0  # 0 = not counting down
    accumulated_text: str = ""
    audio_level: float = 0.0
    last_error: Optional[str] = None


@dataclass
class SessionSettings:
    """Settings captured at session start; later config edits do not affect it."""
    mode: SessionMode = SessionMode.BATCH
    language: str = "auto"
    translate: bool = False
    initial_prompt: str = ""
    chunk_interval_seconds: float = 2.0   # Live: seconds between transcriptions
    overlap_ms: int = 500                 # Live: audio kept across chunk boundaries
    silence_threshold: float = 0.002      # Mean absolute amplitude below this is silence
    silence_timeout_seconds: float = 10.0
    timer_tick_seconds: float = 0.2
    auto_stop_on_silence: bool = True     # Batch: stop after the silence timeout

    @property
    def overlap_samples(self) -> int:
        return ms_to_samples(self.overlap_ms)
