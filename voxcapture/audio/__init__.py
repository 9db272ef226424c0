"""Audio capture, conversion and encoding module."""

from .capture import CaptureSource, PyAudioCaptureSource
from .chunk_emitter import ChunkEmitter, QueuedChunkConsumer
from .quantizer import quantize, quantize_sample, float_to_pcm16
from .resampler import resample
from .status_pub import StatusPublisher
from .wav_encoder import encode_wav, decode_wav, build_wav_header

__all__ = [
    'CaptureSource',
    'PyAudioCaptureSource',
    'ChunkEmitter',
    'QueuedChunkConsumer',
    'quantize',
    'quantize_sample',
    'float_to_pcm16',
    'resample',
    'StatusPublisher',
    'encode_wav',
    'decode_wav',
    'build_wav_header',
]
