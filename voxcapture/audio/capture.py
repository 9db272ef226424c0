"""Capture sources that push float audio blocks to a recording session."""

import logging
import threading
from abc import ABC, abstractmethod
from threading import Thread, Event
from typing import Callable, Optional

import numpy as np
import pyaudio

from ..exceptions import CaptureError, DeviceAcquisitionFailed, DeviceFailure
from ..models.audio import SampleBlock, CaptureOptions

logger = logging.getLogger(__name__)

BlockCallback = Callable[[SampleBlock], None]
ErrorCallback = Callable[[Exception], None]


class CaptureSource(ABC):
    """Abstract base class for devices that deliver mono float audio."""

    @abstractmethod
    def open(self, on_block: BlockCallback, on_error: ErrorCallback, options: CaptureOptions) -> int:
        """Acquire the device and start pushing blocks.

        Args:
            on_block: Called once per captured block, in capture order
            on_error: Called if the device fails after it was acquired
            options: Requested rate, block size and device-level flags

        Returns:
            The sample rate the device actually delivers

        Raises:
            DeviceAcquisitionFailed: If the device cannot be acquired
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop delivering blocks and release the device."""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass


class PyAudioCaptureSource(CaptureSource):
    """Microphone capture through PortAudio, read on a background thread."""

    def __init__(self):
        self.sample_rate: Optional[int] = None
        self.frames_per_block = 1024
        self.total_blocks = 0

        # Recording thread management
        self.capture_thread: Optional[Thread] = None
        self.stop_event = Event()
        self._lock = threading.Lock()

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self._on_block: Optional[BlockCallback] = None
        self._on_error: Optional[ErrorCallback] = None

    @property
    def is_open(self) -> bool:
        return self.capture_thread is not None and self.capture_thread.is_alive()

    @staticmethod
    def is_supported() -> bool:
        """Check whether PortAudio can see a default input device."""
        instance = None
        try:
            instance = pyaudio.PyAudio()
            instance.get_default_input_device_info()
            return True
        except (OSError, IOError) as e:
            logger.debug(f"No input device available: {e}")
            return False
        finally:
            if instance:
                instance.terminate()

    def open(self, on_block: BlockCallback, on_error: ErrorCallback, options: CaptureOptions) -> int:
        with self._lock:
            if self.is_open:
                raise DeviceAcquisitionFailed("Capture source is already in use")
            if options.channels != 1:
                raise DeviceAcquisitionFailed(f"Only mono capture is supported, got {options.channels} channels")

            self.__open_audio_stream(options)
            self._on_block = on_block
            self._on_error = on_error
            self.total_blocks = 0
            self.stop_event.clear()

            self.capture_thread = Thread(target=self._capture_continuously, daemon=True)
            self.capture_thread.name = "AudioCaptureThread"
            self.capture_thread.start()
            return self.sample_rate

    def close(self) -> None:
        logger.info("Closing capture source")
        self.stop_event.set()

        thread = self.capture_thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=2.0)
            if thread.is_alive():
                logger.warning("Capture thread did not stop within 2s, device is released when it exits")
                return

        logger.info(f"Capture source closed. Total blocks: {self.total_blocks}")

    def __open_audio_stream(self, options: CaptureOptions) -> None:
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            if options.sample_rate:
                rate = int(options.sample_rate)
            elif options.device_index is not None:
                info = self.pyaudio_instance.get_device_info_by_index(options.device_index)
                rate = int(info["defaultSampleRate"])
            else:
                info = self.pyaudio_instance.get_default_input_device_info()
                rate = int(info["defaultSampleRate"])

            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=rate,
                input=True,
                input_device_index=options.device_index,
                frames_per_buffer=options.frames_per_block,
                stream_callback=None
            )
        except (OSError, IOError, ValueError) as e:
            self.__release()
            logger.error(f"Failed to acquire input device: {e}")
            raise DeviceAcquisitionFailed(f"Failed to acquire input device: {e}") from e

        self.sample_rate = rate
        self.frames_per_block = options.frames_per_block
        logger.info(f"Audio stream opened: {rate}Hz, {options.frames_per_block} samples/block")
        logger.debug(f"Device options passed through: echo_cancellation={options.echo_cancellation}, "
                     f"noise_suppression={options.noise_suppression}, "
                     f"auto_gain_control={options.auto_gain_control}")

    def __read_block(self) -> SampleBlock:
        data = self.stream.read(self.frames_per_block, exception_on_overflow=False)
        self.total_blocks += 1
        return SampleBlock(np.frombuffer(data, dtype=np.float32), self.sample_rate)

    def _capture_continuously(self) -> None:
        """Internal method: read loop running on the capture thread."""
        try:
            while not self.stop_event.is_set():
                try:
                    block = self.__read_block()
                except (OSError, IOError) as e:
                    if not self.stop_event.is_set():
                        logger.error(f"Audio device failed: {e}")
                        self._on_error(DeviceFailure(f"Audio device failed: {e}"))
                    break

                if self.stop_event.is_set():
                    break
                try:
                    self._on_block(block)
                except Exception as e:
                    logger.error(f"Block handler failed: {e}", exc_info=True)
                    error = e if isinstance(e, CaptureError) else DeviceFailure(f"Block handler failed: {e}")
                    self._on_error(error)
                    break
        finally:
            self.__release()

    def __release(self) -> None:
        # Clean up audio resources
        if self.stream:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except (OSError, IOError) as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_open:
            self.close()
