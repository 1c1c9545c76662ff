"""Domain events for the inventory service."""

from dataclasses import dataclass
from datetime import date


@dataclass
class Event:
    """Base class for all domain events."""
    pass


@dataclass
class ShipmentReceived(Event):
    """Event raised when a shipment has arrived at a site."""
    lot_id: int
    site_id: int
    quantity: int
    received_date: date


@dataclass
class TransferRecorded(Event):
    """Event raised when stock of a lot moved between two sites."""
    lot_id: int
    from_site_id: int
    to_site_id: int
    quantity: int
    transfer_date: date


@dataclass
class InventoryRecorded(Event):
    """Event raised when a physical stock count was entered."""
    lot_id: int
    site_id: int
    quantity_on_hand: int
    recorded_date: date
    recorded_by: str
