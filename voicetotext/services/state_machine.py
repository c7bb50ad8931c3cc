"""Session transition table.

`transition()` is pure: given the current status, a trigger and the session
mode it returns the next status together with the side effects the
controller must carry out, in order. Pairs with no entry return None and
must leave the session untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..models.session import SessionMode, SessionStatus


class Trigger(Enum):
    START = "start"
    STOP = "stop"
    SILENCE_TIMEOUT = "silence_timeout"
    CAPTURE_FAILED = "capture_failed"
    TRANSCRIPTION_SUCCEEDED = "transcription_succeeded"
    TRANSCRIPTION_FAILED = "transcription_failed"


class Intent(Enum):
    RESET_SESSION = "reset_session"
    START_CAPTURE = "start_capture"
    START_TIMER = "start_timer"
    START_SCHEDULER = "start_scheduler"
    STOP_TIMER = "stop_timer"
    STOP_SCHEDULER = "stop_scheduler"
    STOP_CAPTURE = "stop_capture"
    TRANSCRIBE_ALL = "transcribe_all"
    TRANSCRIBE_REMAINDER = "transcribe_remainder"
    DISCARD_REMAINDER = "discard_remainder"
    FINALIZE = "finalize"
    RELEASE_BUFFER = "release_buffer"


@dataclass(frozen=True)
class Transition:
    status: SessionStatus
    intents: Tuple[Intent, ...] = ()


_IDLE_LIKE = (SessionStatus.IDLE, SessionStatus.ERROR)


def transition(status: SessionStatus, trigger: Trigger, mode: SessionMode) -> Optional[Transition]:
    """Look up the transition for `trigger` in `status`."""
    live = mode == SessionMode.LIVE

    if trigger == Trigger.START and status in _IDLE_LIKE:
        intents = [Intent.RESET_SESSION, Intent.START_CAPTURE, Intent.START_TIMER]
        if live:
            intents.append(Intent.START_SCHEDULER)
        return Transition(SessionStatus.RECORDING, tuple(intents))

    if status == SessionStatus.RECORDING:
        if trigger == Trigger.STOP:
            if live:
                # Scheduler is joined before capture stops so no drain races the final read
                return Transition(SessionStatus.TRANSCRIBING, (
                    Intent.STOP_TIMER, Intent.STOP_SCHEDULER,
                    Intent.STOP_CAPTURE, Intent.TRANSCRIBE_REMAINDER,
                ))
            return Transition(SessionStatus.TRANSCRIBING, (
                Intent.STOP_TIMER, Intent.STOP_CAPTURE, Intent.TRANSCRIBE_ALL,
            ))

        if trigger == Trigger.SILENCE_TIMEOUT:
            if live:
                # The scheduler measured the remaining audio as silent
                return Transition(SessionStatus.TRANSCRIBING, (
                    Intent.STOP_TIMER, Intent.STOP_SCHEDULER,
                    Intent.STOP_CAPTURE, Intent.DISCARD_REMAINDER,
                ))
            return Transition(SessionStatus.TRANSCRIBING, (
                Intent.STOP_TIMER, Intent.STOP_CAPTURE, Intent.TRANSCRIBE_ALL,
            ))

        if trigger == Trigger.CAPTURE_FAILED:
            return Transition(SessionStatus.ERROR, (
                Intent.STOP_TIMER, Intent.STOP_SCHEDULER,
                Intent.STOP_CAPTURE, Intent.RELEASE_BUFFER,
            ))

    if status == SessionStatus.TRANSCRIBING:
        if trigger == Trigger.TRANSCRIPTION_SUCCEEDED:
            return Transition(SessionStatus.IDLE, (Intent.FINALIZE, Intent.RELEASE_BUFFER))
        if trigger == Trigger.TRANSCRIPTION_FAILED:
            return Transition(SessionStatus.ERROR, (Intent.FINALIZE, Intent.RELEASE_BUFFER))

    return None
