"""Session controller: drives batch and live sessions through the transition table."""

import random
import string
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Optional

import numpy as np

from ..audio.buffer import SampleBuffer
from ..audio.capture import AudioCapture, request_microphone_access
from ..config import VoiceToTextConfig
from ..errors import CaptureFailed, EngineError, ModelNotLoaded, PermissionDenied, SessionBusy
from ..models.events import SessionEvent, TranscriptionEvent
from ..models.history import TranscriptionEntry, count_words
from ..models.session import SessionMode, SessionSettings, SessionSnapshot, SessionStatus
from ..storage.history_store import HistoryStore
from ..storage.model_store import ModelStore
from ..transcription.adapter import ASRAdapter
from ..transcription.cleaner import TextReplacer
from ..transcription.publisher import SessionEventPublisher, TextPublisher
from .recording_timer import RecordingTimer
from .scheduler import ChunkScheduler
from .state_machine import Intent, Transition, Trigger, transition

logger = logging.getLogger(__name__)


def _new_session_id() -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"{timestamp}_{random_suffix}"


class SessionController:
    """Owns the single recording session and executes transition intents.

    Status changes happen under `lock`; the slow parts of stopping (joining
    the scheduler, running inference) happen outside it so the scheduler
    thread can still deliver its last chunk while the session winds down.
    """

    def __init__(self,
                 config: VoiceToTextConfig,
                 adapter: ASRAdapter,
                 model_store: ModelStore,
                 history_store: HistoryStore,
                 output: TextPublisher,
                 events: Optional[SessionEventPublisher] = None,
                 permission_provider: Callable[[], bool] = request_microphone_access,
                 capture_factory: Optional[Callable[[Callable[[np.ndarray], None]], AudioCapture]] = None):
        """Initialize session controller.

        Args:
            config: Application configuration (read again at every session start)
            adapter: ASR adapter holding the loaded model
            model_store: Resolves model names to paths
            history_store: Receives one entry per finalized, non-empty session
            output: Receives emitted text
            events: Publishes status changes and finalized sessions
            permission_provider: Returns True when the microphone may be used
            capture_factory: Builds a capture object from a block callback
        """
        self.config = config
        self.adapter = adapter
        self.model_store = model_store
        self.history_store = history_store
        self.output = output
        self.events = events or SessionEventPublisher()
        self.permission_provider = permission_provider
        self.capture_factory = capture_factory or self._create_capture

        self.lock = threading.RLock()
        self.status = SessionStatus.IDLE
        self.settings: SessionSettings = config.get_session_settings()
        self.session_id: Optional[str] = None

        self.buffer: Optional[SampleBuffer] = None
        self.capture: Optional[AudioCapture] = None
        self.recording_timer: Optional[RecordingTimer] = None
        self.scheduler: Optional[ChunkScheduler] = None
        self.replacer = TextReplacer(config.get_replacement_rules())

        self.accumulated_text = ""
        self.elapsed_seconds = 0
        self.last_error: Optional[str] = None
        self.last_finalized_text: Optional[str] = None
        self._finalized = False
        self._auto_stopped = False
        self._transcription_failed = False

    @property
    def mode(self) -> SessionMode:
        return self.settings.mode

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    # ── Model management ──────────────────────────────────────

    def load_model(self, model_name: Optional[str] = None) -> None:
        """Load a model from the model store.

        Raises:
            SessionBusy: If a session is recording or transcribing
            ModelNotFound: If the model is not in the store
            ModelLoadFailed: If the engine fails to load it
        """
        name = model_name or self.config.get('transcription.model')
        with self.lock:
            if self.status.is_active:
                raise SessionBusy("Cannot load a model while a session is active")
            try:
                self.adapter.load_model(str(self.model_store.path_for(name)))
            except EngineError as e:
                self.last_error = str(e)
                raise
            self.last_error = None
            logger.info(f"Model ready: {name}")

    def unload_model(self) -> None:
        with self.lock:
            if self.status.is_active:
                raise SessionBusy("Cannot unload the model while a session is active")
            self.adapter.unload_model()

    # ── Session lifecycle ─────────────────────────────────────

    def start(self, mode: Optional[SessionMode] = None) -> bool:
        """Start a new session.

        Returns:
            True if a session started, False if one is already active

        Raises:
            ModelNotLoaded: If no model is loaded
            PermissionDenied: If microphone access is refused
            CaptureFailed: If audio capture cannot start
        """
        with self.lock:
            if self.status.is_active:
                logger.warning(f"Session already {self.status.value}, ignoring start")
                return False
            if not self.adapter.is_model_loaded:
                raise ModelNotLoaded()

        if not self.permission_provider():
            self.last_error = "Microphone permission denied"
            logger.error(self.last_error)
            raise PermissionDenied(self.last_error)

        with self.lock:
            if self.status.is_active:
                return False

            settings = self.config.get_session_settings()
            if mode is not None:
                settings = replace(settings, mode=mode)
            self.settings = settings
            self.replacer = TextReplacer(self.config.get_replacement_rules())

            step = transition(self.status, Trigger.START, settings.mode)
            self.session_id = _new_session_id()
            self._set_status(step.status)
            try:
                self._execute_all(step.intents)
            except CaptureFailed as e:
                logger.error(f"Capture failed, aborting session: {e}")
                self.last_error = str(e)
                self._apply(Trigger.CAPTURE_FAILED)
                raise

        logger.info(f"Started {settings.mode.value} session {self.session_id}")
        return True

    def stop(self) -> Optional[str]:
        """Stop the active session and finalize its text.

        Stopping when nothing is recording is a no-op.

        Returns:
            The finalized text, or None if nothing was stopped
        """
        return self._finish(Trigger.STOP)

    def toggle(self, mode: Optional[SessionMode] = None) -> None:
        if self.status == SessionStatus.RECORDING:
            self.stop()
        elif not self.status.is_active:
            self.start(mode)

    def handle_silence_timeout(self) -> Optional[str]:
        """Called from the timer or scheduler thread when silence ends the session."""
        return self._finish(Trigger.SILENCE_TIMEOUT)

    def get_snapshot(self) -> SessionSnapshot:
        with self.lock:
            countdown = 0
            elapsed = self.elapsed_seconds
            if self.recording_timer is not None and self.status == SessionStatus.RECORDING:
                elapsed = self.recording_timer.elapsed_seconds
                countdown = self.recording_timer.silence_countdown_seconds
            if self.scheduler is not None and self.scheduler.silence.counting:
                countdown = self.scheduler.silence.remaining_seconds_before_stop()
            return SessionSnapshot(
                mode=self.mode,
                status=self.status,
                elapsed_seconds=elapsed,
                silence_countdown_seconds=countdown,
                accumulated_text=self.accumulated_text,
                audio_level=self.buffer.read_level() if self.buffer is not None else 0.0,
                last_error=self.last_error,
            )

    # ── Internals ─────────────────────────────────────────────

    def _finish(self, trigger: Trigger) -> Optional[str]:
        with self.lock:
            step = transition(self.status, trigger, self.mode)
            if step is None:
                logger.debug(f"Ignoring {trigger.value} while {self.status.value}")
                return None
            self._auto_stopped = trigger == Trigger.SILENCE_TIMEOUT
            self._set_status(step.status)

        # Joining the scheduler and running inference must not hold the lock
        outcome = Trigger.TRANSCRIPTION_FAILED
        try:
            self._execute_all(step.intents)
            outcome = Trigger.TRANSCRIPTION_SUCCEEDED
        except EngineError as e:
            logger.error(f"Transcription failed for session {self.session_id}: {e}")
            self.last_error = str(e)
        except Exception as e:
            logger.exception(f"Unexpected error while stopping session {self.session_id}")
            self.last_error = f"Unexpected error: {e}"
        finally:
            self._transcription_failed = outcome == Trigger.TRANSCRIPTION_FAILED
            with self.lock:
                self._apply(outcome)

        return self.last_finalized_text

    def _apply(self, trigger: Trigger) -> Optional[Transition]:
        # Caller holds the lock. The new status is published only after the
        # intents ran, so anyone who sees it also sees the finalized session.
        step = transition(self.status, trigger, self.mode)
        if step is None:
            return None
        self._execute_all(step.intents)
        self._set_status(step.status)
        return step

    def _set_status(self, status: SessionStatus) -> None:
        previous, self.status = self.status, status
        if previous == status:
            return
        logger.info(f"Session status: {previous.value} -> {status.value}")
        self._notify("publish status", self.events.publish_status, SessionEvent(
            session_id=self.session_id or "",
            mode=self.mode,
            status=status,
            previous_status=previous,
            metadata={"last_error": self.last_error} if status == SessionStatus.ERROR else {},
        ))

    def _execute_all(self, intents: Iterable[Intent]) -> None:
        for intent in intents:
            logger.debug(f"Executing {intent.value}")
            self._execute(intent)

    def _execute(self, intent: Intent) -> None:
        if intent == Intent.RESET_SESSION:
            self.buffer = SampleBuffer()
            self.accumulated_text = ""
            self.elapsed_seconds = 0
            self.last_error = None
            self.last_finalized_text = None
            self._finalized = False
            self._auto_stopped = False
            self._transcription_failed = False
            self.recording_timer = None
            self.scheduler = None

        elif intent == Intent.START_CAPTURE:
            self.capture = self.capture_factory(self.buffer.append)
            self.capture.start_recording()

        elif intent == Intent.START_TIMER:
            on_silence = None
            if self.mode == SessionMode.BATCH and self.settings.auto_stop_on_silence:
                on_silence = self.handle_silence_timeout
            self.recording_timer = RecordingTimer(
                self.buffer,
                tick_interval=self.settings.timer_tick_seconds,
                silence_threshold=self.settings.silence_threshold,
                silence_timeout=self.settings.silence_timeout_seconds,
                on_silence_timeout=on_silence,
            )
            self.recording_timer.start()

        elif intent == Intent.START_SCHEDULER:
            self.scheduler = ChunkScheduler(
                self.buffer,
                self.adapter,
                self.settings,
                on_text=self._on_chunk_text,
                on_error=self._on_chunk_error,
                on_silence_timeout=self.handle_silence_timeout,
            )
            self.scheduler.start()

        elif intent == Intent.STOP_TIMER:
            if self.recording_timer is not None:
                self.recording_timer.cancel()
                self.recording_timer.join()
                self.elapsed_seconds = self.recording_timer.elapsed_seconds

        elif intent == Intent.STOP_SCHEDULER:
            if self.scheduler is not None:
                self.scheduler.cancel()
                self.scheduler.join()

        elif intent == Intent.STOP_CAPTURE:
            if self.capture is not None:
                self.capture.stop_recording()
                self.capture = None

        elif intent == Intent.TRANSCRIBE_ALL:
            samples = self.buffer.take_all()
            logger.info(f"Transcribing {len(samples) / self.buffer.sample_rate:.1f}s of audio")
            text = self.adapter.transcribe_once(
                samples,
                language=self.settings.language,
                translate=self.settings.translate,
                initial_prompt=self.settings.initial_prompt,
            )
            self._append_text(text)

        elif intent == Intent.TRANSCRIBE_REMAINDER:
            remaining = self.buffer.take_all()
            if len(remaining) == 0:
                return
            logger.info(f"Transcribing final {len(remaining)} samples of live session")
            text = self.adapter.transcribe_once(
                remaining,
                language=self.settings.language,
                translate=self.settings.translate,
                initial_prompt=self.settings.initial_prompt,
            )
            piece = self._append_text(text)
            if piece:
                self._notify("emit text", self.output.emit, self.replacer.apply(piece))

        elif intent == Intent.DISCARD_REMAINDER:
            discarded = self.buffer.take_all()
            logger.debug(f"Discarded {len(discarded)} silent samples")

        elif intent == Intent.FINALIZE:
            self._finalize()

        elif intent == Intent.RELEASE_BUFFER:
            if self.buffer is not None:
                self.buffer.clear()
            self.buffer = None

    def _append_text(self, text: str) -> str:
        """Append to the session text with a single separating space.

        Returns the piece actually appended ("" for empty text).
        """
        if not text:
            return ""
        with self.lock:
            piece = f" {text}" if self.accumulated_text else text
            self.accumulated_text += piece
            return piece

    def _on_chunk_text(self, text: str) -> None:
        with self.lock:
            if not self.status.is_active:
                logger.warning("Dropping chunk text that arrived after the session ended")
                return
            piece = self._append_text(text)
        self._notify("emit text", self.output.emit, self.replacer.apply(piece))

    def _on_chunk_error(self, error: Exception) -> None:
        with self.lock:
            self.last_error = str(error)

    def _notify(self, action: str, callback: Callable, *args) -> None:
        """Call an output, event or history collaborator.

        A failing collaborator is logged and recorded in `last_error`; it
        never interrupts the session.
        """
        try:
            callback(*args)
        except Exception as e:
            logger.exception(f"Could not {action} for session {self.session_id}")
            self.last_error = f"Could not {action}: {e}"

    def _finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True

        text = self.replacer.apply(self.accumulated_text).strip()
        translated = self.settings.translate
        if text and self.mode == SessionMode.BATCH:
            # Live text has already been emitted chunk by chunk
            self._notify("emit text", self.output.emit, text)

        if text:
            entry = TranscriptionEntry(
                text=text,
                duration_seconds=self.elapsed_seconds,
                word_count=count_words(text),
                mode=self.mode.value,
                translated=translated,
            )
            self._notify("save history", self.history_store.append_history, entry)

        self.last_finalized_text = text
        self._notify("publish finalized session", self.events.publish_finalized, TranscriptionEvent(
            session_id=self.session_id or "",
            text=text,
            mode=self.mode,
            duration_seconds=self.elapsed_seconds,
            translated=translated,
            success=not self._transcription_failed,
            error=self.last_error or "",
            auto_stopped=self._auto_stopped,
        ))
        logger.info(f"Session {self.session_id} finalized: {count_words(text)} words, "
                    f"{self.elapsed_seconds}s")

    def _create_capture(self, callback: Callable[[np.ndarray], None]) -> AudioCapture:
        return AudioCapture(
            callback=callback,
            sample_rate=self.config.get('audio.sample_rate', 16000),
            device_sample_rate=self.config.get('audio.device_sample_rate'),
            chunk_size=self.config.get('audio.chunk_size', 4096),
            channels=self.config.get('audio.channels', 1),
            device_index=self.config.get('audio.device_index'),
        )
