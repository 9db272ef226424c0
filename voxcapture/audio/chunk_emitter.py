"""Streaming PCM chunk delivery."""

import logging
import threading
from collections import deque
from typing import Callable, Optional

from ..models.audio import SampleBlock, PCMBlock
from .quantizer import quantize

logger = logging.getLogger(__name__)

ChunkConsumer = Callable[[bytes], None]


class ChunkEmitter:
    """Quantizes each incoming block and hands the bytes to a consumer.

    Delivery is synchronous: ``emit`` returns only after the consumer has
    returned, so chunks reach the consumer in exactly the order blocks were
    emitted. Consumer exceptions propagate to the caller.
    """

    def __init__(self, consumer: ChunkConsumer):
        self.consumer = consumer
        self.emitted_chunks = 0
        self.emitted_bytes = 0

    def emit(self, block: SampleBlock) -> PCMBlock:
        pcm = quantize(block)
        self.consumer(pcm.data)
        self.emitted_chunks += 1
        self.emitted_bytes += len(pcm.data)
        return pcm


class QueuedChunkConsumer:
    """Decouples a slow consumer from the capture thread.

    Chunks are queued and delivered in FIFO order by a single worker thread.
    When ``max_queued_chunks`` chunks are already waiting, the oldest one is
    dropped to make room and counted in ``dropped_chunks``.
    """

    def __init__(self, consumer: ChunkConsumer, max_queued_chunks: int = 64, name: str = "chunks"):
        """Initialize the queue and start its worker.

        Args:
            consumer: Callback that receives raw PCM bytes
            max_queued_chunks: Queue bound before drop-oldest kicks in
            name: Used for the worker thread name and log lines
        """
        if max_queued_chunks <= 0:
            raise ValueError(f"max_queued_chunks must be positive, got {max_queued_chunks}")

        self.consumer = consumer
        self.max_queued_chunks = max_queued_chunks
        self.name = name
        self.dropped_chunks = 0
        self.delivered_chunks = 0

        self._queue: deque = deque()
        self._condition = threading.Condition()
        self._closed = False

        self._worker = threading.Thread(target=self._worker_loop, daemon=True)
        self._worker.name = f"QueuedChunkConsumer_{name}"
        self._worker.start()
        logger.info(f"QueuedChunkConsumer '{name}' started (max {max_queued_chunks} chunks)")

    def __call__(self, chunk: bytes) -> None:
        with self._condition:
            if self._closed:
                logger.debug(f"Consumer '{self.name}' closed, discarding chunk")
                return
            if len(self._queue) >= self.max_queued_chunks:
                self._queue.popleft()
                self.dropped_chunks += 1
                logger.warning(f"Consumer '{self.name}' is falling behind, "
                               f"dropped oldest chunk ({self.dropped_chunks} total)")
            self._queue.append(chunk)
            self._condition.notify()

    def pending(self) -> int:
        with self._condition:
            return len(self._queue)

    def _worker_loop(self) -> None:
        while True:
            with self._condition:
                while not self._queue and not self._closed:
                    self._condition.wait()
                if not self._queue:
                    break
                chunk = self._queue.popleft()
            try:
                self.consumer(chunk)
                self.delivered_chunks += 1
            except Exception as e:
                logger.error(f"Consumer '{self.name}' failed on chunk: {e}", exc_info=True)
        logger.debug(f"Consumer '{self.name}' worker exiting")

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Stop accepting chunks, deliver what is queued and join the worker."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()
        if self._worker.is_alive() and self._worker is not threading.current_thread():
            self._worker.join(timeout=timeout)
            if self._worker.is_alive():
                logger.warning(f"Consumer '{self.name}' worker did not stop cleanly")
        logger.info(f"Consumer '{self.name}' closed: {self.delivered_chunks} delivered, "
                    f"{self.dropped_chunks} dropped")
