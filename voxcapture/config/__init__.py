"""Simple YAML configuration loader for VoxCapture."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..exceptions import ConfigurationError
from ..models.audio import CaptureOptions

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "audio": {
        "sample_rate": 8000,
        "frames_per_block": 1024,
        "device_index": None,
        "echo_cancellation": True,
        "noise_suppression": True,
        "auto_gain_control": True,
    },
    "streaming": {
        "max_queued_chunks": 0,
    },
    "output": {
        "directory": "recordings",
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/voxcapture.log",
        "console_output": True,
    },
}


class VoxCaptureConfig:
    """VoxCapture configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used.
        """
        self.config_file = Path(config_path) if config_path else None
        self.config = _merge(DEFAULTS, {})

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            return

        if not self.config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = _merge(DEFAULTS, self._load_config())

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if not config:
            raise ConfigurationError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        for section in DEFAULTS:
            if section in config and not isinstance(config[section], dict):
                raise ConfigurationError(f"Section '{section}' must be a mapping, got {config[section]!r}")

        self._resolve_paths(config)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'output' in config and 'directory' in config['output']:
            out_dir = config['output']['directory']
            if not os.path.isabs(out_dir):
                config['output']['directory'] = str(config_dir / out_dir)

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'audio.sample_rate').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'audio.sample_rate')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_sample_rate(self) -> int:
        """Get the target sample rate. Raises ConfigurationError if it is not a positive integer."""
        rate = self.get('audio.sample_rate')
        if not isinstance(rate, int) or isinstance(rate, bool) or rate <= 0:
            raise ConfigurationError(f"audio.sample_rate must be a positive integer, got {rate!r}")
        return rate

    def audio_options(self, sample_rate: Optional[int] = None) -> CaptureOptions:
        """Build device options from the 'audio' section.

        Args:
            sample_rate: Rate to request from the device; None for native rate
        """
        return CaptureOptions(
            sample_rate=sample_rate,
            frames_per_block=int(self.get('audio.frames_per_block', 1024)),
            echo_cancellation=bool(self.get('audio.echo_cancellation', True)),
            noise_suppression=bool(self.get('audio.noise_suppression', True)),
            auto_gain_control=bool(self.get('audio.auto_gain_control', True)),
            device_index=self.get('audio.device_index'),
        )

    def get_output_directory(self) -> str:
        """Get output directory path."""
        out_dir = self.get('output.directory', 'recordings')
        return str(Path(out_dir).absolute())


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = {}
    for key, value in base.items():
        merged[key] = _merge(value, {}) if isinstance(value, dict) else value
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged
