"""Unit tests for StatusPublisher."""

import pytest
from pubsub import pub

from voxcapture.audio.status_pub import StatusPublisher
from voxcapture.models.session import RecordingStatus


@pytest.mark.unit
def test_publishes_status_on_topic():
    received = []

    def listener(status):
        received.append(status)

    pub.subscribe(listener, "test.status")
    try:
        publisher = StatusPublisher("test.status")
        publisher.publish_status(RecordingStatus.RECORDING)
        publisher.publish_status(RecordingStatus.STOPPED)
    finally:
        pub.unsubscribe(listener, "test.status")

    assert received == [RecordingStatus.RECORDING, RecordingStatus.STOPPED]
