"""Transcription module for voicetotext."""

from .base import AbstractTranscriptionEngine
from .adapter import ASRAdapter
from .cleaner import clean_transcription, TextReplacer
from .prompt import compose_prompt, SUPPORTED_LANGUAGES
from .publisher import TextPublisher, SessionEventPublisher

__all__ = [
    "AbstractTranscriptionEngine",
    "ASRAdapter",
    "clean_transcription",
    "TextReplacer",
    "compose_prompt",
    "SUPPORTED_LANGUAGES",
    "TextPublisher",
    "SessionEventPublisher",
]
