"""Mono 16-bit WAV container encoding."""

import logging
import struct

from ..exceptions import EncodingError
from ..models.audio import PCMBlock, WavContainer, BYTES_PER_SAMPLE, WAV_HEADER_SIZE

logger = logging.getLogger(__name__)

PCM_FORMAT_TAG = 1
CHANNELS = 1
BITS_PER_SAMPLE = 16
FMT_CHUNK_SIZE = 16
BLOCK_ALIGN = CHANNELS * BYTES_PER_SAMPLE

# RIFF size, "WAVE", "fmt " chunk, "data" chunk header
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def build_wav_header(data_bytes: int, sample_rate: int) -> bytes:
    """Build the 44-byte header for ``data_bytes`` of mono 16-bit PCM."""
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
    if data_bytes < 0:
        raise ValueError(f"Data size must be non-negative, got {data_bytes}")

    return _HEADER.pack(
        b"RIFF",
        36 + data_bytes,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT_TAG,
        CHANNELS,
        sample_rate,
        sample_rate * BLOCK_ALIGN,
        BLOCK_ALIGN,
        BITS_PER_SAMPLE,
        b"data",
        data_bytes,
    )


def encode_wav(pcm: PCMBlock) -> WavContainer:
    """Wrap a PCMBlock into a WAV container.

    Args:
        pcm: 16-bit mono samples with their sample rate

    Returns:
        WavContainer whose header sizes match the payload exactly
    """
    header = build_wav_header(len(pcm.data), pcm.sample_rate)
    container = WavContainer(data=header + pcm.data, sample_rate=pcm.sample_rate)
    logger.debug(f"Encoded WAV: {pcm.sample_count} samples @ {pcm.sample_rate}Hz, "
                 f"{len(container.data)} bytes")
    return container


def decode_wav(data: bytes) -> PCMBlock:
    """Parse a mono 16-bit PCM WAV produced by :func:`encode_wav`.

    Raises:
        EncodingError: If the bytes are not a well-formed container
    """
    if len(data) < WAV_HEADER_SIZE:
        raise EncodingError(f"WAV data too short: {len(data)} bytes")

    (riff, riff_size, wave, fmt, fmt_size, format_tag, channels, sample_rate,
     byte_rate, block_align, bits, data_tag, data_bytes) = _HEADER.unpack_from(data)

    if riff != b"RIFF" or wave != b"WAVE" or fmt != b"fmt " or data_tag != b"data":
        raise EncodingError("Missing RIFF/WAVE chunk markers")
    if fmt_size != FMT_CHUNK_SIZE or format_tag != PCM_FORMAT_TAG:
        raise EncodingError(f"Unsupported format tag {format_tag}")
    if channels != CHANNELS or bits != BITS_PER_SAMPLE or block_align != BLOCK_ALIGN:
        raise EncodingError(f"Expected mono 16-bit PCM, got {channels}ch/{bits}bit")
    if byte_rate != sample_rate * BLOCK_ALIGN:
        raise EncodingError(f"Byte rate {byte_rate} does not match sample rate {sample_rate}")
    if riff_size != 36 + data_bytes or len(data) != WAV_HEADER_SIZE + data_bytes:
        raise EncodingError(
            f"Declared sizes (riff={riff_size}, data={data_bytes}) do not match "
            f"payload of {len(data) - WAV_HEADER_SIZE} bytes")

    return PCMBlock(data=bytes(data[WAV_HEADER_SIZE:]), sample_rate=sample_rate)
