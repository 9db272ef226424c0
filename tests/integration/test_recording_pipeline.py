"""Integration tests for complete capture-to-artifact workflows."""

import io
import time
import wave

import pytest
import numpy as np

from voxcapture.audio.capture import PyAudioCaptureSource
from voxcapture.audio.wav_encoder import decode_wav
from voxcapture.models.audio import CaptureOptions
from voxcapture.models.session import SessionState
from voxcapture.services.recording_session import BatchRecordingSession, StreamingRecordingSession


def paced_read(data: bytes, delay: float = 0.005):
    def read(frames, exception_on_overflow=True):
        time.sleep(delay)
        return data
    return read


@pytest.mark.integration
class TestRecordingPipelineIntegration:
    """End-to-end tests with a mocked PortAudio device."""

    def test_batch_recording_to_wav(self, mock_pyaudio):
        t = np.arange(1024) / 44100
        tone = (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
        mock_pyaudio['stream'].read.side_effect = paced_read(tone.tobytes())

        session = BatchRecordingSession(PyAudioCaptureSource(), target_sample_rate=8000)
        assert session.start()
        time.sleep(0.2)
        container = session.stop()

        assert session.state is SessionState.STOPPED
        stats = session.get_recording_stats()
        assert stats.total_blocks > 0
        expected_samples = round(stats.total_samples * 8000 / 44100)
        assert abs(container.sample_count - expected_samples) <= 1

        with wave.open(io.BytesIO(container.data), "rb") as wf:
            assert wf.getframerate() == 8000
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            frames = np.frombuffer(wf.readframes(wf.getnframes()), dtype="<i2")
        np.testing.assert_array_equal(frames, decode_wav(container.data).samples)

    def test_streaming_recording_chunks(self, mock_pyaudio):
        mock_pyaudio['stream'].read.side_effect = paced_read(
            np.full(320, 0.25, dtype=np.float32).tobytes())
        chunks = []

        session = StreamingRecordingSession(
            PyAudioCaptureSource(), chunks.append, sample_rate=16000,
            options=CaptureOptions(frames_per_block=320))
        assert session.start()
        time.sleep(0.2)
        session.stop()

        assert mock_pyaudio['instance'].open.call_args.kwargs['rate'] == 16000
        assert len(chunks) == session.get_recording_stats().total_blocks
        assert len(chunks) > 0
        expected = np.full(320, int(0.25 * 32767), dtype="<i2").tobytes()
        assert all(chunk == expected for chunk in chunks)

    def test_acquisition_failure_end_to_end(self, mock_pyaudio):
        mock_pyaudio['instance'].open.side_effect = OSError("Device unavailable")
        errors = []

        session = BatchRecordingSession(PyAudioCaptureSource(), on_error=errors.append)

        assert session.start() is False
        assert session.state is SessionState.IDLE
        assert len(errors) == 1
