"""Forward activity events to Kafka through the Dapr pub/sub building block."""
import json
import os
import uuid
from datetime import datetime
from typing import Any, Callable, Dict
import logging

from dapr.clients import DaprClient

logger = logging.getLogger(__name__)

EVENT_PUBLISHING_ENABLED = os.environ.get("EVENT_PUBLISHING_ENABLED", "false").lower() == "true"
PUBSUB_NAME = os.environ.get("PUBSUB_NAME", "kafka-pubsub")
ACTIVITY_TOPIC = os.environ.get("ACTIVITY_TOPIC", "activity-events")


class DaprEventPublisher:
    """Publishes activity events to a pub/sub topic via the Dapr sidecar."""

    def __init__(self, client_factory: Callable[[], DaprClient] = DaprClient):
        self.client_factory = client_factory

    def publish_event(self, topic: str, event_type: str, data: Dict[str, Any], source: str = "wellness-calendar-api"):
        """Publish an event envelope to a topic."""
        event_envelope = {
            "event_id": str(uuid.uuid4()),
            "type": event_type,
            "timestamp": datetime.utcnow().isoformat(),
            "source": source,
            "data": data
        }
        try:
            with self.client_factory() as client:
                client.publish_event(
                    pubsub_name=PUBSUB_NAME,
                    topic_name=topic,
                    data=json.dumps(event_envelope, default=str),
                    data_content_type="application/json"
                )
        except Exception as e:
            logger.error(f"Failed to publish event to topic {topic}: {str(e)}")
            raise

        logger.info(f"Published event {event_type} to topic {topic}")
        return {"success": True, "event_id": event_envelope["event_id"]}

    def __call__(self, event_type: str, payload: Dict[str, Any]):
        """Dispatcher handler: forward the event to the activity topic."""
        self.publish_event(ACTIVITY_TOPIC, event_type, payload)
