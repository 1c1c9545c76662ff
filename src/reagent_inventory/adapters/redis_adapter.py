"""Redis adapter for publishing stock-movement events."""

import json
import logging
from dataclasses import asdict
from datetime import date
import redis

from config import get_redis_host_and_port
from reagent_inventory.domain.events import Event

logger = logging.getLogger(__name__)

MOVEMENTS_CHANNEL = "inventory:movements"

r = redis.Redis(**get_redis_host_and_port())


def _serialize_event(event: Event) -> str:
    """Serialize event to JSON, tagging it with its type and handling dates."""
    event_dict = asdict(event)

    # date also covers datetime
    for key, value in event_dict.items():
        if isinstance(value, date):
            event_dict[key] = value.isoformat()

    event_dict["event_type"] = type(event).__name__
    return json.dumps(event_dict)


def publish(channel: str, event: Event):
    """Publish event to Redis channel."""
    logger.info("publishing: channel=%s, event=%s", channel, event)
    message = _serialize_event(event)
    r.publish(channel, message)
