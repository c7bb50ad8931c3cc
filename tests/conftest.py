"""Pytest configuration and fixtures for voicetotext tests."""

import pytest
import tempfile
import logging
from pathlib import Path
from unittest.mock import Mock, patch
import numpy as np

from voicetotext.errors import CaptureFailed
from voicetotext.models.transcription import InferenceResult
from voicetotext.transcription.adapter import ASRAdapter
from voicetotext.transcription.base import AbstractTranscriptionEngine


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without hardware or models")
    config.addinivalue_line("markers", "integration: end-to-end session flows with fakes")
    config.addinivalue_line("markers", "slow: tests that sleep on real timers")


class FakeEngine(AbstractTranscriptionEngine):
    """Scripted engine: returns queued texts in call order.

    Every call is recorded as (samples, options). Call numbers listed in
    `fail_on` (1-based) raise instead of returning.
    """

    def __init__(self, responses=None, fail_on=(), default_text=""):
        self.responses = list(responses or [])
        self.fail_on = set(fail_on)
        self.default_text = default_text
        self.calls = []
        self.loaded = []
        self.unloaded = []

    def load(self, model_path):
        self.loaded.append(model_path)
        return {"path": model_path}

    def unload(self, handle):
        self.unloaded.append(handle)

    def infer(self, handle, samples, options):
        self.calls.append((np.array(samples, copy=True), options))
        call_number = len(self.calls)
        if call_number in self.fail_on:
            raise RuntimeError(f"engine failed on call {call_number}")
        text = self.responses.pop(0) if self.responses else self.default_text
        return InferenceResult(text=text, context=(call_number, call_number + 100))


class FakeCapture:
    """Stands in for AudioCapture; the test pushes blocks through `feed()`."""

    def __init__(self, callback, fail_on_start=False):
        self.callback = callback
        self.fail_on_start = fail_on_start
        self.is_recording = False
        self.start_calls = 0
        self.stop_calls = 0

    def start_recording(self):
        self.start_calls += 1
        if self.fail_on_start:
            raise CaptureFailed("Could not start audio capture: device busy")
        self.is_recording = True

    def stop_recording(self):
        self.stop_calls += 1
        self.is_recording = False

    def feed(self, block):
        self.callback(block)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def model_path(temp_data_dir):
    """A model directory in the store layout, with a placeholder weights file."""
    path = Path(temp_data_dir) / "models" / "base"
    path.mkdir(parents=True)
    (path / "model.bin").write_bytes(b"\x00")
    return str(path)


@pytest.fixture
def fake_engine_factory():
    return FakeEngine


@pytest.fixture
def fake_capture_factory():
    return FakeCapture


@pytest.fixture
def fake_engine():
    return FakeEngine(default_text="hello world")


@pytest.fixture
def loaded_adapter(fake_engine, model_path):
    adapter = ASRAdapter(fake_engine)
    adapter.load_model(model_path)
    return adapter


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream: 1024 frames of silent 16-bit audio
        mock_stream.read.return_value = b'\x00' * 2048
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'name': 'Mock Microphone',
            'maxInputChannels': 1,
            'defaultSampleRate': 16000.0,
        }

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def audio_test_data():
    """Generate float32 audio blocks for testing."""
    def generate_audio(pattern="sine", num_samples=3200, amplitude=0.1, seed=0):
        """Generate mono 16 kHz samples.

        Args:
            pattern: Type of audio pattern ('sine', 'noise', 'silence')
            num_samples: Number of samples
            amplitude: Peak amplitude
            seed: Random seed for 'noise'

        Returns:
            np.ndarray: float32 samples
        """
        if pattern == "sine":
            t = np.arange(num_samples) / 16000
            wave_data = amplitude * np.sin(2 * np.pi * 440 * t)
        elif pattern == "noise":
            wave_data = np.random.default_rng(seed).uniform(-amplitude, amplitude, num_samples)
        elif pattern == "silence":
            wave_data = np.zeros(num_samples)
        else:
            raise ValueError(f"Unknown pattern: {pattern}")
        return wave_data.astype(np.float32)

    return generate_audio


@pytest.fixture
def manual_workers():
    """Keep timer and scheduler threads from starting; tests call tick() themselves."""
    with patch('voicetotext.services.ticker.PeriodicWorker.start') as mock_start:
        yield mock_start


@pytest.fixture
def session_harness(temp_data_dir, model_path):
    """Build a SessionController wired to fakes.

    Returns a factory; keyword arguments are dot-path config overrides.
    """
    from types import SimpleNamespace
    from voicetotext.config import VoiceToTextConfig
    from voicetotext.services.session_controller import SessionController
    from voicetotext.storage.history_store import HistoryStore
    from voicetotext.storage.model_store import ModelStore

    def _make(engine=None, load_model=True, **overrides):
        config = VoiceToTextConfig()
        config.set('storage.data_directory', temp_data_dir)
        for key, value in overrides.items():
            config.set(key.replace('__', '.'), value)

        harness = SimpleNamespace(
            engine=engine or FakeEngine(default_text="hello world"),
            captures=[],
            permission=True,
            capture_fails=False,
            output=Mock(),
            events=Mock(),
            history=HistoryStore(temp_data_dir),
        )

        def capture_factory(callback):
            capture = FakeCapture(callback, fail_on_start=harness.capture_fails)
            harness.captures.append(capture)
            return capture

        harness.adapter = ASRAdapter(harness.engine)
        harness.controller = SessionController(
            config,
            harness.adapter,
            ModelStore(temp_data_dir),
            harness.history,
            output=harness.output,
            events=harness.events,
            permission_provider=lambda: harness.permission,
            capture_factory=capture_factory,
        )
        if load_model:
            harness.controller.load_model('base')
        return harness

    return _make
