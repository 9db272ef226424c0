"""Pytest configuration and fixtures for VoxCapture tests."""

import pytest
import tempfile
import logging
from unittest.mock import Mock, patch
import numpy as np

from voxcapture.audio.capture import CaptureSource
from voxcapture.exceptions import DeviceAcquisitionFailed
from voxcapture.models.audio import SampleBlock


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware")
    config.addinivalue_line("markers", "integration: end-to-end pipeline tests")


class FakeCaptureSource(CaptureSource):
    """Capture source driven by the test: blocks are pushed by hand."""

    def __init__(self, native_rate: int = 48000, fail_on_open: bool = False):
        self.native_rate = native_rate
        self.fail_on_open = fail_on_open
        self.options = None
        self.open_calls = 0
        self.close_calls = 0
        self._open = False
        self._on_block = None
        self._on_error = None

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, on_block, on_error, options):
        self.open_calls += 1
        if self.fail_on_open:
            raise DeviceAcquisitionFailed("Permission denied")
        self.options = options
        self._on_block = on_block
        self._on_error = on_error
        self._open = True
        return options.sample_rate or self.native_rate

    def close(self):
        self.close_calls += 1
        self._open = False

    def push(self, block: SampleBlock) -> None:
        """Deliver a block the way a device callback would."""
        self._on_block(block)

    def fail(self, error: Exception) -> None:
        self._on_error(error)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def fake_source():
    """Capture source with a 48kHz native rate."""
    return FakeCaptureSource()


@pytest.fixture
def failing_source():
    """Capture source that refuses to open."""
    return FakeCaptureSource(fail_on_open=True)


@pytest.fixture
def sine_block():
    """Factory for sine-wave SampleBlocks."""
    def make_block(sample_count=1024, sample_rate=16000, freq=440.0, amplitude=0.5):
        t = np.arange(sample_count) / sample_rate
        return SampleBlock(amplitude * np.sin(2 * np.pi * freq * t), sample_rate)
    return make_block


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # 1024 float32 samples of silence per read
        mock_stream.read.return_value = np.zeros(1024, dtype=np.float32).tobytes()
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'index': 0,
            'defaultSampleRate': 44100.0,
        }

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def make_source():
    """Factory for FakeCaptureSource with custom settings."""
    return FakeCaptureSource
