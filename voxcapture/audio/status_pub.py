"""Status publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.session import RecordingStatus

logger = logging.getLogger(__name__)


class StatusPublisher:
    """Publishes recording status events using pubsub.pub."""

    def __init__(self, topic: str = "recording.status"):
        """Initialize status publisher.

        Args:
            topic: Pub/sub topic name for status events
        """
        self.topic = topic
        logger.info(f"StatusPublisher initialized with topic: {topic}")

    def publish_status(self, status: RecordingStatus) -> None:
        """Publish a status event to the pub/sub topic.

        Args:
            status: RecordingStatus to publish
        """
        pub.sendMessage(self.topic, status=status)
        logger.debug(f"Published status: {status.value}")
