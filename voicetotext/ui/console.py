"""Rich console printer for emitted text and finished sessions."""

import logging
import threading
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.events import SessionEvent, TranscriptionEvent
from ..models.history import TranscriptionStats
from ..models.session import SessionSnapshot, SessionStatus
from ..transcription.publisher import FINALIZED_TOPIC, STATUS_TOPIC, TEXT_TOPIC

logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    SessionStatus.IDLE: "dim",
    SessionStatus.RECORDING: "bold red",
    SessionStatus.TRANSCRIBING: "bold yellow",
    SessionStatus.ERROR: "bold magenta",
}


class ConsolePrinter:
    """Subscribes to the text and session topics and prints them.

    Emitted text is written inline without a newline so live chunks read as
    one running sentence; a finished session closes the line.
    """

    def __init__(self, console: Optional[Console] = None,
                 text_topic: str = TEXT_TOPIC,
                 status_topic: str = STATUS_TOPIC,
                 finalized_topic: str = FINALIZED_TOPIC):
        self.console = console or Console()
        self.lock = threading.Lock()
        self.topics = (text_topic, status_topic, finalized_topic)
        self.line_open = False

        pub.subscribe(self._on_text, text_topic)
        pub.subscribe(self._on_status, status_topic)
        pub.subscribe(self._on_finalized, finalized_topic)
        logger.info(f"ConsolePrinter subscribed to {', '.join(self.topics)}")

    def _on_text(self, text: str) -> None:
        with self.lock:
            self.console.print(text, end="", style="green", markup=False, highlight=False)
            self.line_open = True

    def _on_status(self, event: SessionEvent) -> None:
        style = _STATUS_STYLES.get(event.status, "")
        with self.lock:
            self._close_line()
            self.console.print(f"● {event.status.value}", style=style)

    def _on_finalized(self, event: TranscriptionEvent) -> None:
        with self.lock:
            self._close_line()
            if not event.success:
                self.console.print(f"❌ Transcription failed: {event.error}", style="red")
                return
            if not event.text:
                self.console.print("(no speech detected)", style="dim")
                return
            reason = "silence" if event.auto_stopped else "stop"
            self.console.print(Panel(
                event.text,
                title=f"{event.mode.value} · {event.duration_seconds}s",
                subtitle=f"ended by {reason}",
                border_style="blue",
            ))

    def print_snapshot(self, snapshot: SessionSnapshot) -> None:
        line = f"⏱ {snapshot.elapsed_seconds}s  level {snapshot.audio_level:.2f}"
        if snapshot.silence_countdown_seconds:
            line += f"  stopping in {snapshot.silence_countdown_seconds}s"
        with self.lock:
            self._close_line()
            self.console.print(line, style=_STATUS_STYLES.get(snapshot.status, ""))

    def print_stats(self, stats: TranscriptionStats) -> None:
        table = Table(title="Statistics")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Transcriptions", str(stats.total_sessions))
        table.add_row("Words", str(stats.total_words))
        table.add_row("Minutes recorded", f"{stats.total_minutes:.1f}")
        table.add_row("Translations", str(stats.total_translations))
        table.add_row("Minutes saved", f"{stats.time_saved_minutes:.1f}")
        with self.lock:
            self._close_line()
            self.console.print(table)

    def close(self) -> None:
        pub.unsubscribe(self._on_text, self.topics[0])
        pub.unsubscribe(self._on_status, self.topics[1])
        pub.unsubscribe(self._on_finalized, self.topics[2])

    def _close_line(self) -> None:
        # Caller holds the lock.
        if self.line_open:
            self.console.print()
            self.line_open = False
