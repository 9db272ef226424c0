"""Float to 16-bit linear PCM conversion."""

import math

import numpy as np

from ..models.audio import SampleBlock, PCMBlock

PCM16_NEGATIVE_SCALE = 32768.0
PCM16_POSITIVE_SCALE = 32767.0


def quantize_sample(x: float) -> int:
    """Quantize one float sample to a signed 16-bit integer."""
    if math.isnan(x):
        x = 0.0
    x = max(-1.0, min(1.0, x))
    scaled = x * PCM16_NEGATIVE_SCALE if x < 0 else x * PCM16_POSITIVE_SCALE
    return int(scaled)


def float_to_pcm16(samples: np.ndarray) -> bytes:
    """Convert float samples to little-endian int16 bytes.

    NaN becomes silence, values are clamped to [-1.0, 1.0], negative values
    scale by 32768 and the rest by 32767, then truncate toward zero.
    """
    x = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    x = np.clip(x, -1.0, 1.0)
    scaled = np.where(x < 0, x * PCM16_NEGATIVE_SCALE, x * PCM16_POSITIVE_SCALE)
    return scaled.astype("<i2").tobytes()


def quantize(block: SampleBlock) -> PCMBlock:
    """Quantize a whole SampleBlock into a PCMBlock at the same rate."""
    return PCMBlock(data=float_to_pcm16(block.samples), sample_rate=block.sample_rate)
