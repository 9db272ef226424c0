"""Audio-related data models."""

import base64
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .session import SessionState

BYTES_PER_SAMPLE = 2  # 16-bit linear PCM
WAV_HEADER_SIZE = 44
WAV_MIME_TYPE = "audio/wav"


@dataclass(frozen=True, eq=False)
class SampleBlock:
    """Mono float samples in [-1.0, 1.0] tagged with their sample rate.

    The samples array is copied on construction and made read-only, so a
    block never changes after it has been handed to the next stage.
    """
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float32).reshape(-1)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @property
    def sample_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_seconds(self) -> float:
        return self.sample_count / self.sample_rate

    @classmethod
    def concatenate(cls, blocks: Sequence["SampleBlock"], sample_rate: int) -> "SampleBlock":
        """Join blocks in order into a single block at ``sample_rate``."""
        if not blocks:
            return cls(np.zeros(0, dtype=np.float32), sample_rate)
        return cls(np.concatenate([block.samples for block in blocks]), sample_rate)

    def __len__(self) -> int:
        return self.sample_count


@dataclass(frozen=True)
class PCMBlock:
    """Signed 16-bit little-endian PCM samples."""
    data: bytes
    sample_rate: int

    @property
    def sample_count(self) -> int:
        return len(self.data) // BYTES_PER_SAMPLE

    @property
    def samples(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype="<i2")

    @property
    def duration_seconds(self) -> float:
        return self.sample_count / self.sample_rate

    def __len__(self) -> int:
        return self.sample_count


@dataclass(frozen=True)
class WavContainer:
    """A finished mono 16-bit WAV file held in memory."""
    data: bytes
    sample_rate: int
    mime_type: str = WAV_MIME_TYPE

    @property
    def data_bytes(self) -> int:
        return len(self.data) - WAV_HEADER_SIZE

    @property
    def sample_count(self) -> int:
        return self.data_bytes // BYTES_PER_SAMPLE

    @property
    def duration_seconds(self) -> float:
        return self.sample_count / self.sample_rate

    def to_uri(self) -> str:
        """Return a ``data:`` URI that references the container bytes."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class CaptureOptions:
    """Options negotiated with the capture device.

    ``sample_rate`` of None asks the device for its native rate. The echo
    cancellation, noise suppression and gain flags are passed to the device
    untouched and have no effect on encoding.
    """
    sample_rate: Optional[int] = None
    channels: int = 1
    frames_per_block: int = 1024
    echo_cancellation: bool = True
    noise_suppression: bool = True
    auto_gain_control: bool = True
    device_index: Optional[int] = None


@dataclass
class AudioStats:
    """Recording session statistics."""
    state: SessionState
    duration_seconds: float
    sample_rate: Optional[int]
    total_blocks: int
    total_samples: int
    dropped_chunks: int = 0
