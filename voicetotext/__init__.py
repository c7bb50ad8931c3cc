"""voicetotext - microphone dictation with Whisper transcription."""

__version__ = "0.1.0"
