"""Event models published over pypubsub."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .session import SessionMode, SessionStatus


@dataclass
class SessionEvent:
    """Session lifecycle event (status change)."""
    session_id: str
    mode: SessionMode
    status: SessionStatus
    previous_status: SessionStatus
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TranscriptionEvent:
    """Final transcription of a session."""
    session_id: str
    text: str
    mode: SessionMode
    duration_seconds: int
    translated: bool
    success: bool
    error: str = ""
    auto_stopped: bool = False  # True when ended by the silence timeout
    timestamp: datetime = field(default_factory=datetime.now)
