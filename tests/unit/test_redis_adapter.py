"""Unit tests for publishing movement events to Redis."""
import json
from datetime import date

from reagent_inventory.adapters import redis_adapter
from reagent_inventory.domain.events import ShipmentReceived, TransferRecorded


def test_serialize_event_tags_type_and_dates():
    event = TransferRecorded(
        lot_id=1, from_site_id=2, to_site_id=3, quantity=10, transfer_date=date(2024, 2, 1)
    )
    payload = json.loads(redis_adapter._serialize_event(event))

    assert payload == {
        "lot_id": 1,
        "from_site_id": 2,
        "to_site_id": 3,
        "quantity": 10,
        "transfer_date": "2024-02-01",
        "event_type": "TransferRecorded",
    }


def test_publish_reaches_subscribers(fake_redis):
    pubsub = fake_redis.pubsub()
    pubsub.subscribe(redis_adapter.MOVEMENTS_CHANNEL)
    pubsub.get_message(timeout=1)  # subscribe confirmation

    redis_adapter.publish(
        redis_adapter.MOVEMENTS_CHANNEL,
        ShipmentReceived(lot_id=1, site_id=2, quantity=50, received_date=date(2024, 1, 8)),
    )

    message = pubsub.get_message(timeout=1)
    assert message["type"] == "message"
    assert json.loads(message["data"])["event_type"] == "ShipmentReceived"
