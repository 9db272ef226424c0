"""Main application entry point for VoxCapture."""

import sys
import time
import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from pubsub import pub

from voxcapture.audio.capture import PyAudioCaptureSource
from voxcapture.audio.status_pub import StatusPublisher
from voxcapture.exceptions import VoxCaptureError
from voxcapture.models.session import RecordingStatus
from voxcapture.services.recording_session import (
    RecordingSession,
    BatchRecordingSession,
    StreamingRecordingSession,
)

from .config import VoxCaptureConfig

logger = logging.getLogger(__name__)

STATUS_TOPIC = "recording.status"


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = VoxCaptureConfig(config_path)
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.session: Optional[RecordingSession] = None
        self.errors = []
        self._stream_file = None

    def init(self, mode: str, output: Path) -> None:
        logger.info("Initializing session...")

        sample_rate = self.config.get_sample_rate()
        self.status_publisher = StatusPublisher(STATUS_TOPIC)
        pub.subscribe(self._on_status, STATUS_TOPIC)
        capture_source = PyAudioCaptureSource()

        logger.info(f"Mode: {mode}, target rate: {sample_rate}Hz, output: {output}")

        if mode == "batch":
            self.session = BatchRecordingSession(
                capture_source,
                target_sample_rate=sample_rate,
                options=self.config.audio_options(),
                on_status=self.status_publisher.publish_status,
                on_error=self._on_error,
            )
        else:
            self._stream_file = open(output, 'wb')
            self.session = StreamingRecordingSession(
                capture_source,
                consumer=self._stream_file.write,
                sample_rate=sample_rate,
                options=self.config.audio_options(sample_rate),
                on_status=self.status_publisher.publish_status,
                on_error=self._on_error,
                max_queued_chunks=int(self.config.get('streaming.max_queued_chunks', 0)),
            )

    def run(self, duration: int, output: Path) -> bool:
        try:
            if not self.session.start():
                return False
            time.sleep(duration)
            container = self.session.stop()
            if container is not None:
                output.write_bytes(container.data)
                logger.info(f"Wrote {len(container.data)} bytes to {output}")
            return not self.errors
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        if self.session and self.session.is_recording:
            self.session.stop()
        if self._stream_file:
            self._stream_file.close()
            self._stream_file = None

    def _on_status(self, status: RecordingStatus) -> None:
        print(f"[{status.value}]")

    def _on_error(self, error: Exception) -> None:
        self.errors.append(error)
        logger.error(f"Recording error: {error}")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/voxcapture.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("=" * 50)
    logger.info("VoxCapture starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def default_output_path(config: VoxCaptureConfig, mode: str) -> Path:
    suffix = "wav" if mode == "batch" else "pcm"
    out_dir = Path(config.get_output_directory())
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir / f"recording_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{suffix}"


def main() -> None:
    """Main entry point for VoxCapture."""
    parser = argparse.ArgumentParser(
        description="VoxCapture - record microphone audio as WAV or raw 16-bit PCM"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--mode",
        choices=["batch", "stream"],
        default="batch",
        help="batch: one WAV file after recording; stream: raw PCM chunks as they arrive"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=5,
        help="Recording duration in seconds (default: 5)"
    )

    parser.add_argument(
        "--output",
        type=Path,
        help="Output file (default: timestamped file in output.directory)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="VoxCapture v0.1.0"
    )

    args = parser.parse_args()

    server = None
    try:
        server = Server(args.config, args.log_level)
        output = args.output or default_output_path(server.config, args.mode)
        server.init(args.mode, output)
        if not server.run(args.duration, output):
            sys.exit(1)
    except KeyboardInterrupt:
        if server:
            server.cleanup()
        print("\nStopped.")
    except VoxCaptureError as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
