"""Sample-rate conversion for captured audio blocks."""

import logging
import math

import numpy as np
from scipy.signal import resample_poly

from ..models.audio import SampleBlock

logger = logging.getLogger(__name__)


def resampled_length(sample_count: int, source_rate: int, target_rate: int) -> int:
    """Number of samples that cover the same duration at ``target_rate``."""
    # Round half up; integer arithmetic keeps long recordings exact.
    return (2 * sample_count * target_rate + source_rate) // (2 * source_rate)


def resample(block: SampleBlock, target_rate: int) -> SampleBlock:
    """Resample *block* to *target_rate* using a polyphase filter.

    The output always holds exactly ``round(n * target_rate / source_rate)``
    samples. A block already at the target rate is returned as is.

    Args:
        block: Source samples
        target_rate: Desired sample rate in Hz

    Returns:
        SampleBlock at ``target_rate`` with the same duration
    """
    if target_rate <= 0 or block.sample_rate <= 0:
        raise ValueError(
            f"Sample rates must be positive (source={block.sample_rate}, target={target_rate})")

    if block.sample_rate == target_rate:
        return block

    target_len = resampled_length(block.sample_count, block.sample_rate, target_rate)
    if block.sample_count == 0 or target_len == 0:
        return SampleBlock(np.zeros(target_len, dtype=np.float32), target_rate)

    g = math.gcd(block.sample_rate, target_rate)
    up = target_rate // g
    down = block.sample_rate // g
    resampled = resample_poly(block.samples.astype(np.float64), up, down)

    # resample_poly yields ceil(n * up / down) samples, never fewer than target_len
    resampled = resampled[:target_len]

    logger.debug(f"Resampled {block.sample_count} samples {block.sample_rate}Hz -> "
                 f"{target_len} samples {target_rate}Hz (up={up}, down={down})")
    return SampleBlock(resampled.astype(np.float32), target_rate)
