"""Recording sessions that bind a capture source to an encoding pipeline."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from ..audio.capture import CaptureSource
from ..audio.chunk_emitter import ChunkEmitter, ChunkConsumer, QueuedChunkConsumer
from ..audio.quantizer import quantize
from ..audio.resampler import resample
from ..audio.wav_encoder import encode_wav
from ..exceptions import CaptureError, DeviceAcquisitionFailed, EncodingError
from ..models.audio import SampleBlock, WavContainer, CaptureOptions, AudioStats
from ..models.session import SessionState, RecordingStatus

logger = logging.getLogger(__name__)

StatusCallback = Callable[[RecordingStatus], None]
ErrorCallback = Callable[[Exception], None]


class RecordingSession(ABC):
    """One-shot recording lifecycle: IDLE -> RECORDING -> STOPPED.

    Blocks pushed by the capture source are processed one at a time under a
    block lock, in arrival order. ``stop()`` clears the accepting flag in the
    same step that marks the session as stopping, so any block that has not
    yet entered the pipeline is discarded. It then takes the block lock so an
    in-flight block finishes, and only then releases the capture source.
    A stopped session cannot be restarted.
    """

    def __init__(
        self,
        capture_source: CaptureSource,
        options: Optional[CaptureOptions] = None,
        on_status: Optional[StatusCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ):
        self.capture_source = capture_source
        self.options = options or CaptureOptions()
        self.on_status = on_status
        self.on_error = on_error
        self.on_stop = on_stop

        self.state = SessionState.IDLE
        self.sample_rate: Optional[int] = None
        self._state_lock = threading.Lock()
        self._block_lock = threading.RLock()
        self._accepting = False
        self._stopping = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.total_blocks = 0
        self.total_samples = 0

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    def start(self) -> bool:
        """Acquire the capture source and begin recording.

        Returns:
            True if this call started recording, False if it was a no-op or
            the device could not be acquired
        """
        with self._state_lock:
            if self.state is not SessionState.IDLE:
                logger.warning(f"start() ignored, session is {self.state.value}")
                return False

            self._prepare()
            try:
                self.sample_rate = self.capture_source.open(
                    self.on_frame_block, self.on_capture_error, self.options)
            except (CaptureError, OSError) as e:
                logger.error(f"Could not start recording: {e}")
                self._teardown()
                error = e if isinstance(e, CaptureError) else DeviceAcquisitionFailed(str(e))
                self._report_error(error)
                return False

            with self._block_lock:
                self.start_time = datetime.now()
                self.state = SessionState.RECORDING
                self._accepting = True

        logger.info(f"Recording started at {self.sample_rate}Hz")
        self._report_status(RecordingStatus.RECORDING)
        return True

    def on_frame_block(self, block: SampleBlock) -> None:
        """Entry point for the capture source; discards blocks unless recording."""
        with self._block_lock:
            if not self._accepting:
                logger.debug("Discarding block, session is not accepting audio")
                return
            self.total_blocks += 1
            self.total_samples += block.sample_count
            self._handle_block(block)

    def stop(self):
        """Stop recording and finish the pipeline.

        Returns:
            The pipeline result (a WavContainer for batch sessions), or None
            if the session was not recording

        Raises:
            EncodingError: If the final artifact could not be produced
        """
        if not self._begin_shutdown():
            logger.warning(f"stop() ignored, session is {self.state.value}")
            return None

        logger.info("Stopping recording")
        # Waits for an in-flight block to finish
        with self._block_lock:
            pass

        try:
            result = self._finish()
        except Exception as e:
            logger.error(f"Failed to finish recording: {e}", exc_info=True)
            self._teardown()
            if isinstance(e, EncodingError):
                raise
            raise EncodingError(f"Failed to finish recording: {e}") from e
        finally:
            self._release_source()
            self._mark_stopped()

        self._after_stop(result)
        self._report_status(RecordingStatus.STOPPED)
        if self.on_stop:
            self.on_stop()
        return result

    def on_capture_error(self, error: Exception) -> None:
        """Handle a device failure reported by the capture source."""
        if not self._begin_shutdown():
            logger.warning(f"Ignoring capture error after shutdown: {error}")
            return

        logger.error(f"Capture device failed, discarding recording: {error}")
        with self._block_lock:
            self._teardown()

        self._release_source()
        self._mark_stopped()
        self._report_error(error)
        self._report_status(RecordingStatus.STOPPED)
        if self.on_stop:
            self.on_stop()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            end = self.end_time or datetime.now()
            duration = (end - self.start_time).total_seconds()

        return AudioStats(
            state=self.state,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            total_blocks=self.total_blocks,
            total_samples=self.total_samples,
        )

    def _begin_shutdown(self) -> bool:
        with self._state_lock:
            if self.state is not SessionState.RECORDING or self._stopping:
                return False
            self._stopping = True
            self._accepting = False
            return True

    def _release_source(self) -> None:
        try:
            self.capture_source.close()
        except (CaptureError, OSError) as e:
            logger.warning(f"Error releasing capture source: {e}")

    def _mark_stopped(self) -> None:
        with self._state_lock:
            self.state = SessionState.STOPPED
            self.end_time = datetime.now()
        logger.info(f"Recording stopped. Total blocks: {self.total_blocks}, "
                    f"samples: {self.total_samples}")

    def _report_status(self, status: RecordingStatus) -> None:
        if self.on_status:
            self.on_status(status)

    def _report_error(self, error: Exception) -> None:
        if self.on_error:
            self.on_error(error)

    # Pipeline hooks

    def _prepare(self) -> None:
        pass

    @abstractmethod
    def _handle_block(self, block: SampleBlock) -> None:
        pass

    def _finish(self):
        return None

    def _after_stop(self, result) -> None:
        pass

    def _teardown(self) -> None:
        pass


class BatchRecordingSession(RecordingSession):
    """Buffers the whole recording and encodes one WAV container on stop.

    The device records at its native rate; the buffered audio is resampled
    to ``target_sample_rate`` only once, after capture has ended.
    """

    def __init__(
        self,
        capture_source: CaptureSource,
        target_sample_rate: int = 8000,
        options: Optional[CaptureOptions] = None,
        on_status: Optional[StatusCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_ready: Optional[Callable[[WavContainer], None]] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ):
        if target_sample_rate <= 0:
            raise ValueError(f"Target sample rate must be positive, got {target_sample_rate}")
        super().__init__(capture_source, options, on_status, on_error, on_stop)
        self.target_sample_rate = target_sample_rate
        self.on_ready = on_ready
        self.container: Optional[WavContainer] = None
        self._blocks: List[SampleBlock] = []

    def _handle_block(self, block: SampleBlock) -> None:
        self._blocks.append(block)

    def _finish(self) -> WavContainer:
        blocks, self._blocks = self._blocks, []
        recording = SampleBlock.concatenate(blocks, self.sample_rate)
        logger.info(f"Encoding {recording.sample_count} samples @ {self.sample_rate}Hz "
                    f"to WAV @ {self.target_sample_rate}Hz")

        pcm = quantize(resample(recording, self.target_sample_rate))
        self.container = encode_wav(pcm)
        return self.container

    def _after_stop(self, result: WavContainer) -> None:
        if self.on_ready:
            self.on_ready(result)

    def _teardown(self) -> None:
        self._blocks = []
        self.container = None

    def get_blob(self) -> Optional[bytes]:
        """Return the finished WAV bytes, or None before a successful stop."""
        return self.container.data if self.container else None

    def get_url(self) -> Optional[str]:
        """Return a data URI for the finished WAV, or None before a successful stop."""
        return self.container.to_uri() if self.container else None

    def play(self, player: Callable[[WavContainer], None]) -> bool:
        """Hand the finished container to an external player.

        Returns:
            True if playback was requested, False if nothing was recorded yet
        """
        if not self.container:
            logger.warning("Nothing to play, no finished recording")
            return False
        player(self.container)
        self._report_status(RecordingStatus.PLAYING)
        return True


class StreamingRecordingSession(RecordingSession):
    """Quantizes and delivers every block as raw PCM as soon as it arrives.

    The device is asked for ``sample_rate`` directly, so no resampling is
    done per block. With ``max_queued_chunks`` > 0 the consumer is fed from a
    bounded drop-oldest queue instead of synchronously on the capture thread.
    """

    def __init__(
        self,
        capture_source: CaptureSource,
        consumer: ChunkConsumer,
        sample_rate: int = 8000,
        options: Optional[CaptureOptions] = None,
        on_status: Optional[StatusCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_stop: Optional[Callable[[], None]] = None,
        max_queued_chunks: int = 0,
    ):
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        options = replace(options or CaptureOptions(), sample_rate=sample_rate)
        super().__init__(capture_source, options, on_status, on_error, on_stop)
        self.consumer = consumer
        self.max_queued_chunks = max_queued_chunks
        self.queue: Optional[QueuedChunkConsumer] = None
        self.emitter: Optional[ChunkEmitter] = None

    def _prepare(self) -> None:
        if self.max_queued_chunks > 0:
            self.queue = QueuedChunkConsumer(self.consumer, self.max_queued_chunks, name="stream")
            self.emitter = ChunkEmitter(self.queue)
        else:
            self.emitter = ChunkEmitter(self.consumer)

    def _handle_block(self, block: SampleBlock) -> None:
        if block.sample_rate != self.options.sample_rate:
            logger.warning(f"Block at {block.sample_rate}Hz, expected {self.options.sample_rate}Hz")
        self.emitter.emit(block)

    def _finish(self) -> None:
        self._close_queue()
        return None

    def _teardown(self) -> None:
        self._close_queue()

    def _close_queue(self) -> None:
        if self.queue:
            self.queue.close()

    def get_recording_stats(self) -> AudioStats:
        stats = super().get_recording_stats()
        if self.queue:
            stats.dropped_chunks = self.queue.dropped_chunks
        return stats
