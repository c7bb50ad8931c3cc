"""Audio capture module: continuous microphone recording in a background thread."""

import logging
from threading import Thread, Event
from typing import Optional, Callable

import numpy as np
import pyaudio

from ..errors import CaptureFailed
from .convert import to_mono_16k

logger = logging.getLogger(__name__)


def request_microphone_access() -> bool:
    """Check that a default input device exists and can be queried."""
    pa = None
    try:
        pa = pyaudio.PyAudio()
        info = pa.get_default_input_device_info()
        available = int(info.get('maxInputChannels', 0)) > 0
        logger.info(f"Default input device: {info.get('name')} (available={available})")
        return available
    except (IOError, OSError) as e:
        logger.warning(f"Microphone not available: {e}")
        return False
    finally:
        if pa is not None:
            pa.terminate()


class AudioCapture:
    """Continuous audio capture feeding mono 16 kHz float32 blocks to a callback.

    The hardware is opened at its own rate and channel count; every block is
    downmixed and resampled before it reaches the callback.
    """

    def __init__(
        self,
        callback: Callable[[np.ndarray], None],
        sample_rate: int = 16000,
        device_sample_rate: Optional[int] = None,
        chunk_size: int = 4096,
        channels: int = 1,
        device_index: Optional[int] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives each converted block (float32, mono, `sample_rate`)
            sample_rate: Target sample rate delivered to the callback
            device_sample_rate: Hardware capture rate (None = device default)
            chunk_size: Frames read from the device per block
            channels: Number of hardware channels to capture
            device_index: PyAudio input device index (None = default device)
        """
        self.audio_block_callback = callback
        self.sample_rate = sample_rate
        self.device_sample_rate = device_sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.device_index = device_index
        self.format = pyaudio.paInt16

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def start_recording(self) -> None:
        """Open the input stream and start reading in a background thread.

        Raises:
            CaptureFailed: If the device or stream cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        try:
            self.stream = self.__open_audio_stream()
        except Exception as e:
            self.__release_audio()
            raise CaptureFailed(f"Could not start audio capture: {e}") from e

        self.stop_event.clear()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and clean up resources."""
        if not self.is_recording:
            logger.debug("No recording in progress")
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        if self.device_sample_rate is None:
            if self.device_index is None:
                info = self.pyaudio_instance.get_default_input_device_info()
            else:
                info = self.pyaudio_instance.get_device_info_by_index(self.device_index)
            self.device_sample_rate = int(info['defaultSampleRate'])

        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.device_sample_rate,
            input=True,
            input_device_index=self.device_index,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.device_sample_rate}Hz x{self.channels} -> "
                    f"{self.sample_rate}Hz mono, {self.chunk_size} frames/chunk")
        return stream

    def __read_audio_chunk(self) -> bytes:
        audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        return audio_chunk

    def __deliver(self, audio_chunk: bytes) -> None:
        block = to_mono_16k(audio_chunk, self.channels, self.device_sample_rate, self.sample_rate)
        self.audio_block_callback(block)

    def __release_audio(self) -> None:
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except (IOError, OSError) as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                self.__deliver(self.__read_audio_chunk())
            # One last read so audio spoken right before stop is not lost
            self.__deliver(self.__read_audio_chunk())
        except (IOError, OSError) as e:
            logger.error(f"Audio capture error: {e}")
        finally:
            self.__release_audio()

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_recording:
            self.stop_recording()
