"""Session-related data models."""

from enum import Enum


class SessionState(Enum):
    """Lifecycle state of a recording session."""
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


class RecordingStatus(Enum):
    """Status events reported to observers."""
    RECORDING = "recording"
    STOPPED = "stopped"
    PLAYING = "playing"
