"""Unit tests for FasterWhisperEngine with a mocked WhisperModel."""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
import numpy as np

from voicetotext.errors import ModelLoadFailed
from voicetotext.models.transcription import InferenceOptions
from voicetotext.transcription.whisper_engine import FasterWhisperEngine


def segment(text, tokens):
    return SimpleNamespace(text=text, tokens=tokens)


@pytest.fixture
def model():
    handle = Mock()
    handle.transcribe.return_value = (
        iter([segment(" Hello", [50, 51]), segment(" world.", [52])]),
        SimpleNamespace(language="en"),
    )
    return handle


@pytest.mark.unit
class TestFasterWhisperEngine:

    def test_load_builds_whisper_model(self):
        engine = FasterWhisperEngine(device="cpu", compute_type="int8", cpu_threads=2)

        with patch('voicetotext.transcription.whisper_engine.WhisperModel') as whisper_model:
            handle = engine.load("/models/base")

        whisper_model.assert_called_once_with("/models/base", device="cpu", compute_type="int8", cpu_threads=2)
        assert handle is whisper_model.return_value

    def test_load_failure_raises_model_load_failed(self):
        engine = FasterWhisperEngine()

        with patch('voicetotext.transcription.whisper_engine.WhisperModel',
                   side_effect=RuntimeError("Unable to open file 'model.bin'")):
            with pytest.raises(ModelLoadFailed, match="model.bin"):
                engine.load("/models/broken")

    def test_batch_inference(self, model):
        engine = FasterWhisperEngine(beam_size=5)

        result = engine.infer(model, np.zeros(16000, dtype=np.float32),
                              InferenceOptions(language="auto", prompt_text="# Style\nCasual"))

        assert result.text == " Hello world."
        assert result.context == (50, 51, 52)
        assert result.detected_language == "en"
        kwargs = model.transcribe.call_args.kwargs
        assert kwargs["language"] is None
        assert kwargs["task"] == "transcribe"
        assert kwargs["beam_size"] == 5
        assert kwargs["initial_prompt"] == "# Style\nCasual"
        assert kwargs["condition_on_previous_text"] is False
        assert kwargs["without_timestamps"] is False

    def test_live_inference_passes_token_context(self, model):
        engine = FasterWhisperEngine(beam_size=5)

        engine.infer(model, np.zeros(100, dtype=np.float32),
                     InferenceOptions(language="de", translate=True, prompt_text="ignored",
                                      prompt_context=(7, 8), live=True))

        kwargs = model.transcribe.call_args.kwargs
        assert kwargs["language"] == "de"
        assert kwargs["task"] == "translate"
        assert kwargs["beam_size"] == 1
        assert kwargs["initial_prompt"] == [7, 8]
        assert kwargs["without_timestamps"] is True

    def test_no_prompt_passes_none(self, model):
        FasterWhisperEngine().infer(model, np.zeros(10, dtype=np.float32), InferenceOptions())
        assert model.transcribe.call_args.kwargs["initial_prompt"] is None

    def test_unload_releases_ctranslate2_model(self, model):
        FasterWhisperEngine().unload(model)
        model.model.unload_model.assert_called_once_with()
