"""Commands for the inventory service."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class Command:
    """Base class for all commands."""
    pass


@dataclass
class CreateSite(Command):
    name: str
    location: Optional[str] = None
    is_active: bool = True


@dataclass
class UpdateSite(Command):
    site_id: int
    name: str
    location: Optional[str] = None
    is_active: bool = True


@dataclass
class DeleteSite(Command):
    site_id: int


@dataclass
class CreateReagent(Command):
    name: str
    description: Optional[str] = None


@dataclass
class DeleteReagent(Command):
    reagent_id: int


@dataclass
class CreateLot(Command):
    lot_number: str
    reagent_id: int
    expiration_date: date


@dataclass
class DeleteLot(Command):
    lot_id: int


@dataclass
class RecordShipment(Command):
    """Command to record a shipment; received_date is None while in transit."""
    lot_id: int
    site_id: int
    quantity: int
    shipped_date: date
    received_date: Optional[date] = None


@dataclass
class ReceiveShipment(Command):
    """Command to mark an in-transit shipment as received."""
    shipment_id: int
    received_date: date


@dataclass
class DeleteShipment(Command):
    shipment_id: int


@dataclass
class RecordTransfer(Command):
    lot_id: int
    from_site_id: int
    to_site_id: int
    quantity: int
    transfer_date: date


@dataclass
class DeleteTransfer(Command):
    transfer_id: int


@dataclass
class RecordInventory(Command):
    """Command to enter a physical stock count for a site/lot pair."""
    lot_id: int
    site_id: int
    quantity_on_hand: int
    recorded_date: date
    recorded_by: str
