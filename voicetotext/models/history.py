"""History, statistics and text replacement models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List


def count_words(text: str) -> int:
    return len(text.split())


@dataclass
class TranscriptionEntry:
    """A finalized transcription saved to history."""
    text: str
    timestamp: datetime = field(default_factory=datetime.now)
    duration_seconds: int = 0
    word_count: int = 0
    mode: str = "batch"
    translated: bool = False


@dataclass
class TranscriptionStats:
    """Aggregate usage statistics across sessions."""
    total_seconds: int = 0
    total_words: int = 0
    total_translations: int = 0
    total_sessions: int = 0

    @property
    def total_minutes(self) -> float:
        return self.total_seconds / 60.0

    @property
    def time_saved_minutes(self) -> float:
        """Estimated time saved vs typing at ~40 WPM."""
        return max(0.0, self.total_words / 40.0 - self.total_minutes)

    def record(self, seconds: int, text: str, translated: bool) -> None:
        self.total_seconds += seconds
        self.total_words += count_words(text)
        if translated:
            self.total_translations += 1
        self.total_sessions += 1


@dataclass
class ReplacementRule:
    """Case-insensitive find/replace applied to finished text."""
    find: str
    replace: str
    enabled: bool = True


def default_replacement_rules() -> List[ReplacementRule]:
    return [
        ReplacementRule(find="arroba", replace="@"),
        ReplacementRule(find="hashtag", replace="#"),
        ReplacementRule(find="guion bajo", replace="_"),
    ]
