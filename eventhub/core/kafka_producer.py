# eventhub/core/kafka_producer.py

import json
import logging
from typing import Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from eventhub.core.config import settings

logger = logging.getLogger(__name__)

_producer: Optional[KafkaProducer] = None


def get_kafka_singleton() -> Optional[KafkaProducer]:
    """
    Lazily create the process-wide producer.

    Returns None when publishing is disabled or the broker is unreachable,
    so callers can skip publishing instead of failing the request.
    """
    global _producer
    if not settings.KAFKA_ENABLED:
        return None
    if _producer is None:
        try:
            _producer = KafkaProducer(
                bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
                value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
                # Fail fast on connection issues during a request
                request_timeout_ms=5000,
            )
        except KafkaError as e:
            logger.error(f"Could not connect to Kafka: {e}", exc_info=True)
            return None
    return _producer


def close_kafka_singleton() -> None:
    global _producer
    if _producer is not None:
        _producer.flush()  # Ensure all buffered messages are sent
        _producer.close()
        _producer = None
