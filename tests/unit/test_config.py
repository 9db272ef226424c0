"""Unit tests for VoxCaptureConfig."""

import pytest
from pathlib import Path

from voxcapture.config import VoxCaptureConfig
from voxcapture.exceptions import ConfigurationError


def write_config(directory, text):
    path = Path(directory) / "voxcapture.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.mark.unit
class TestVoxCaptureConfig:
    """Test cases for YAML configuration loading."""

    def test_defaults_without_file(self):
        config = VoxCaptureConfig()

        assert config.get_sample_rate() == 8000
        assert config.get('audio.frames_per_block') == 1024
        assert config.get('streaming.max_queued_chunks') == 0
        assert config.get('missing.key', 'fallback') == 'fallback'

    def test_file_overrides_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, "audio:\n  sample_rate: 16000\n  echo_cancellation: false\n")

        config = VoxCaptureConfig(path)

        assert config.get_sample_rate() == 16000
        assert config.get('audio.frames_per_block') == 1024
        options = config.audio_options()
        assert options.sample_rate is None
        assert options.echo_cancellation is False
        assert options.noise_suppression is True

    def test_audio_options_with_rate(self):
        options = VoxCaptureConfig().audio_options(16000)

        assert options.sample_rate == 16000
        assert options.channels == 1

    def test_relative_paths_resolved(self, temp_data_dir):
        path = write_config(temp_data_dir, "output:\n  directory: out\nlogging:\n  file_path: logs/app.log\n")

        config = VoxCaptureConfig(path)

        assert config.get('output.directory') == str(Path(temp_data_dir) / "out")
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs/app.log")

    def test_set_value(self):
        config = VoxCaptureConfig()

        config.set('audio.sample_rate', 22050)
        config.set('new.nested.key', True)

        assert config.get_sample_rate() == 22050
        assert config.get('new.nested.key') is True

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(ConfigurationError):
            VoxCaptureConfig(str(Path(temp_data_dir) / "nope.yaml"))

    def test_invalid_yaml(self, temp_data_dir):
        path = write_config(temp_data_dir, "audio: [unclosed\n")

        with pytest.raises(ConfigurationError):
            VoxCaptureConfig(path)

    def test_empty_file(self, temp_data_dir):
        path = write_config(temp_data_dir, "")

        with pytest.raises(ConfigurationError):
            VoxCaptureConfig(path)

    @pytest.mark.parametrize("text", [
        "audio:\n  sample_rate: 16000\noutput:\n",
        "logging:\n",
        "audio: 16000\n",
    ])
    def test_section_must_be_mapping(self, temp_data_dir, text):
        path = write_config(temp_data_dir, text)

        with pytest.raises(ConfigurationError):
            VoxCaptureConfig(path)

    def test_invalid_sample_rate(self):
        config = VoxCaptureConfig()
        config.set('audio.sample_rate', 0)

        with pytest.raises(ConfigurationError):
            config.get_sample_rate()
