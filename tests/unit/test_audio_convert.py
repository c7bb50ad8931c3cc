"""Unit tests for PCM conversion and resampling."""

import pytest
import numpy as np

from voicetotext.audio.convert import downmix, pcm16_to_float32, resample, to_mono_16k


@pytest.mark.unit
class TestConvert:

    def test_pcm16_to_float32_scale(self):
        data = np.array([0, 16384, -32768, 32767], dtype=np.int16).tobytes()

        samples = pcm16_to_float32(data)

        assert samples.dtype == np.float32
        np.testing.assert_allclose(samples, [0.0, 0.5, -1.0, 32767 / 32768])

    def test_downmix_averages_channels(self):
        interleaved = np.array([1.0, 0.0, 0.5, 0.5], dtype=np.float32)
        np.testing.assert_allclose(downmix(interleaved, 2), [0.5, 0.5])

    def test_downmix_mono_is_unchanged(self):
        samples = np.array([0.1, 0.2], dtype=np.float32)
        assert downmix(samples, 1) is samples

    def test_downmix_drops_partial_frame(self):
        assert len(downmix(np.ones(5, dtype=np.float32), 2)) == 2

    def test_resample_same_rate_is_noop(self):
        samples = np.ones(100, dtype=np.float32)
        assert resample(samples, 16000, 16000) is samples

    @pytest.mark.parametrize("rate,num_samples,expected", [
        (48000, 4800, 1600),
        (44100, 4410, 1600),
        (8000, 4800, 9600),
    ])
    def test_resample_length(self, rate, num_samples, expected):
        samples = np.zeros(num_samples, dtype=np.float32)
        assert len(resample(samples, rate, 16000)) == expected

    def test_to_mono_16k(self):
        stereo_48k = np.zeros(4800 * 2, dtype=np.int16).tobytes()

        samples = to_mono_16k(stereo_48k, channels=2, sample_rate=48000)

        assert samples.dtype == np.float32
        assert len(samples) == 1600
