"""Services layer for VoxCapture recording sessions."""

from .recording_session import RecordingSession, BatchRecordingSession, StreamingRecordingSession

__all__ = [
    "RecordingSession",
    "BatchRecordingSession",
    "StreamingRecordingSession"
]
