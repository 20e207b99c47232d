# eventhub/utils/kafka_helpers.py
"""
Kafka helper functions for publishing registration events.
Uses the singleton producer from eventhub.core.kafka_producer.
"""
import logging

from eventhub.core import kafka_producer

logger = logging.getLogger(__name__)

# Kafka Topics
TOPIC_REGISTRATION_EVENTS = "registration.events.v1"

# Event types
REGISTRATION_CREATED = "REGISTRATION_CREATED"
REGISTRATION_CANCELLED = "REGISTRATION_CANCELLED"


def build_registration_payload(event_type: str, registration) -> dict:
    return {
        "type": event_type,
        "registrationId": registration.id,
        "resourceType": registration.resource_type,
        "resourceId": registration.resource_id,
        "eventId": registration.event_id,
        "actorId": registration.actor_id,
        "actorRole": registration.actor_role,
        "status": registration.status,
    }


def publish_registration_event(event_type: str, registration) -> bool:
    """
    Publish a registration lifecycle event to Kafka.

    Consumed by the notification service (confirmation mails, admin popups).
    Publishing is best effort: the registration is already committed, so a
    broker failure is logged and reported through the return value only.

    Returns:
        bool: True if published successfully, False otherwise
    """
    try:
        producer = kafka_producer.get_kafka_singleton()

        if producer is None:
            logger.debug("Kafka producer unavailable, skipping event publish")
            return False

        event_data = build_registration_payload(event_type, registration)
        future = producer.send(
            TOPIC_REGISTRATION_EVENTS,
            key=registration.actor_id.encode("utf-8"),
            value=event_data,
        )
        # Wait for the send to complete (with timeout)
        future.get(timeout=10)

        logger.info(
            f"Published {event_type} for actor {registration.actor_id}, "
            f"{registration.resource_type} {registration.resource_id}"
        )
        return True

    except Exception as e:
        logger.error(f"Failed to publish {event_type} event: {e}", exc_info=True)
        return False
