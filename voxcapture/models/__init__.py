"""Data models for the VoxCapture pipeline."""

from .audio import SampleBlock, PCMBlock, WavContainer, CaptureOptions, AudioStats
from .session import SessionState, RecordingStatus

__all__ = [
    "SampleBlock",
    "PCMBlock",
    "WavContainer",
    "CaptureOptions",
    "AudioStats",
    "SessionState",
    "RecordingStatus",
]
