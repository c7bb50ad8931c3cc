"""Pub/sub publishing of transcribed text and session events."""

import logging

from pubsub import pub

from ..models.events import SessionEvent, TranscriptionEvent

logger = logging.getLogger(__name__)

TEXT_TOPIC = "transcription.text"
STATUS_TOPIC = "session.status"
FINALIZED_TOPIC = "session.finalized"


class TextPublisher:
    """Output collaborator that publishes emitted text on a pypubsub topic.

    Whoever subscribes (console printer, keystroke simulator, clipboard
    writer) decides what "output" means.
    """

    def __init__(self, topic: str = TEXT_TOPIC):
        """Initialize text publisher.

        Args:
            topic: Pub/sub topic name for emitted text
        """
        self.topic = topic
        logger.info(f"TextPublisher initialized with topic: {topic}")

    def emit(self, text: str) -> None:
        if not text:
            return
        pub.sendMessage(self.topic, text=text)
        logger.debug(f"Emitted {len(text)} characters on {self.topic}")


class SessionEventPublisher:
    """Publishes session status changes and finalized transcriptions."""

    def __init__(self, status_topic: str = STATUS_TOPIC, finalized_topic: str = FINALIZED_TOPIC):
        self.status_topic = status_topic
        self.finalized_topic = finalized_topic

    def publish_status(self, event: SessionEvent) -> None:
        pub.sendMessage(self.status_topic, event=event)
        logger.debug(f"Session {event.session_id}: {event.previous_status.value} -> {event.status.value}")

    def publish_finalized(self, event: TranscriptionEvent) -> None:
        pub.sendMessage(self.finalized_topic, event=event)
        logger.debug(f"Session {event.session_id} finalized ({len(event.text)} characters)")
