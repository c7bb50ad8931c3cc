"""Error taxonomy for voicetotext sessions.

Every error here is local to a single recording session; none of them is
meant to bring the process down.
"""


class VoiceToTextError(Exception):
    """Base class for all voicetotext errors."""


class PermissionDenied(VoiceToTextError):
    """Microphone access was refused; the session never starts."""


class CaptureFailed(VoiceToTextError):
    """The audio hardware or capture stream could not be started."""


class SessionBusy(VoiceToTextError):
    """Operation rejected because a session is recording or transcribing."""


class EngineError(VoiceToTextError):
    """Base class for failures at the ASR engine boundary."""


class ModelNotLoaded(EngineError):
    """No model is loaded in the engine."""

    def __init__(self, message: str = "Model not loaded. Load a model first."):
        super().__init__(message)


class ModelLoadFailed(EngineError):
    """The engine could not initialise the requested model."""


class ModelNotFound(ModelLoadFailed):
    """The model file does not exist in the model store."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Whisper model not found at {path}. Download it first.")


class EngineInferenceFailed(EngineError):
    """A single inference call reported failure."""
