"""Unit tests for AudioCapture class."""

import pytest
import time
from unittest.mock import Mock, patch
import numpy as np

from voicetotext.audio.capture import AudioCapture, request_microphone_access
from voicetotext.errors import CaptureFailed


@pytest.mark.unit
class TestAudioCapture:
    """Test cases for AudioCapture class."""

    def test_initialization(self):
        """Test AudioCapture initialization with default parameters."""
        capture = AudioCapture(callback=Mock())

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 4096
        assert capture.channels == 1
        assert capture.device_sample_rate is None
        assert capture.is_recording is False
        assert capture.total_chunks == 0

    def test_start_recording(self, mock_pyaudio):
        """Test starting audio recording."""
        capture = AudioCapture(callback=Mock())

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()

            assert capture.is_recording is True
            assert capture.total_chunks == 0
            assert capture.recording_thread is not None
            assert capture.recording_thread.daemon is True
            capture.recording_thread.join(timeout=1.0)
            mock_record.assert_called_once()

        # Device default rate is picked up when none is configured
        assert capture.device_sample_rate == 16000
        mock_pyaudio['instance'].open.assert_called_once()

    def test_start_recording_already_recording(self, mock_pyaudio):
        """Test starting recording when already recording."""
        capture = AudioCapture(callback=Mock())
        capture.is_recording = True

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()
            mock_record.assert_not_called()

        mock_pyaudio['instance'].open.assert_not_called()

    def test_start_recording_open_failure_raises_capture_failed(self, mock_pyaudio):
        mock_pyaudio['instance'].open.side_effect = OSError("Invalid input device")
        capture = AudioCapture(callback=Mock())

        with pytest.raises(CaptureFailed, match="Invalid input device"):
            capture.start_recording()

        assert capture.is_recording is False
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_stop_recording(self, mock_pyaudio):
        """Test stopping audio recording."""
        capture = AudioCapture(callback=Mock())

        with patch.object(capture, '_record_continuously'):
            capture.start_recording()
            capture.stop_recording()

            assert capture.is_recording is False
            assert capture.stop_event.is_set()

    def test_stop_recording_not_recording(self):
        """Test stopping recording when not recording."""
        capture = AudioCapture(callback=Mock())

        capture.stop_recording()
        assert capture.is_recording is False

    @pytest.mark.slow
    def test_record_continuously_delivers_float_blocks(self, mock_pyaudio):
        """Recorded PCM frames reach the callback as float32 blocks."""
        received = []
        capture = AudioCapture(callback=received.append, chunk_size=4)

        samples = np.array([0, 16384, 0, -16384], dtype=np.int16)
        mock_pyaudio['stream'].read.return_value = samples.tobytes()

        capture.start_recording()
        time.sleep(0.1)
        capture.stop_recording()

        assert capture.total_chunks > 0
        assert len(received) == capture.total_chunks
        block = received[0]
        assert block.dtype == np.float32
        np.testing.assert_allclose(block, [0.0, 0.5, 0.0, -0.5])

        # Stream and PyAudio are released when the loop exits
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    @pytest.mark.slow
    def test_stereo_48k_is_converted_to_mono_16k(self, mock_pyaudio):
        received = []
        capture = AudioCapture(callback=received.append, device_sample_rate=48000,
                               chunk_size=480, channels=2)
        mock_pyaudio['stream'].read.return_value = np.zeros(960, dtype=np.int16).tobytes()

        capture.start_recording()
        time.sleep(0.1)
        capture.stop_recording()

        assert received
        assert all(len(block) == 160 for block in received)

    def test_read_error_ends_recording_loop(self, mock_pyaudio):
        received = []
        capture = AudioCapture(callback=received.append)
        mock_pyaudio['stream'].read.side_effect = OSError("Input overflowed")

        capture.start_recording()
        capture.recording_thread.join(timeout=1.0)

        assert not capture.recording_thread.is_alive()
        assert received == []
        mock_pyaudio['instance'].terminate.assert_called_once()


@pytest.mark.unit
class TestMicrophoneAccess:

    def test_access_granted_with_input_device(self, mock_pyaudio):
        assert request_microphone_access() is True
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_access_denied_without_input_channels(self, mock_pyaudio):
        mock_pyaudio['instance'].get_default_input_device_info.return_value = {
            'name': 'Output only', 'maxInputChannels': 0, 'defaultSampleRate': 44100.0,
        }
        assert request_microphone_access() is False

    def test_access_denied_when_no_default_device(self, mock_pyaudio):
        mock_pyaudio['instance'].get_default_input_device_info.side_effect = IOError("No Default Input Device Available")
        assert request_microphone_access() is False
        mock_pyaudio['instance'].terminate.assert_called_once()
