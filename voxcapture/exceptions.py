"""Exception definitions for the VoxCapture pipeline."""


class VoxCaptureError(Exception):
    """Base exception class for VoxCapture errors."""

    pass


class ConfigurationError(VoxCaptureError):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


class CaptureError(VoxCaptureError):
    """Raised when the capture device cannot deliver audio."""

    pass


class DeviceAcquisitionFailed(CaptureError):
    """Raised when the capture device is unavailable or access is denied."""

    pass


class DeviceFailure(CaptureError):
    """Raised when the capture device stops unexpectedly mid-recording."""

    pass


class EncodingError(VoxCaptureError):
    """Raised when a WAV container cannot be produced or parsed."""

    pass
