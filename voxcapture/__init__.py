"""VoxCapture: microphone capture to 16-bit PCM WAV or live PCM chunks."""

__version__ = "0.1.0"
