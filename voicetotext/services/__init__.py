"""Services layer for voicetotext session logic."""

from .recording_timer import RecordingTimer
from .scheduler import ChunkScheduler
from .session_controller import SessionController
from .state_machine import Intent, Transition, Trigger, transition
from .ticker import CancellationToken, PeriodicWorker, run_ticks

__all__ = [
    "RecordingTimer",
    "ChunkScheduler",
    "SessionController",
    "Intent",
    "Transition",
    "Trigger",
    "transition",
    "CancellationToken",
    "PeriodicWorker",
    "run_ticks",
]
