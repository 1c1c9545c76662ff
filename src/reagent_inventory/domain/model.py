"""Domain model for sites, reagents, lots and stock movements."""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from reagent_inventory.domain.events import (
    InventoryRecorded,
    ShipmentReceived,
    TransferRecorded,
)
from reagent_inventory.domain.exceptions import InvalidEntity, InvalidMovement


def _require_name(value: Optional[str], what: str) -> str:
    if not value or not value.strip():
        raise InvalidEntity(f"{what} is required")
    return value.strip()


@dataclass(eq=False)
class Site:
    name: str
    location: Optional[str] = None
    is_active: bool = True
    id: Optional[int] = None

    def __post_init__(self):
        self.name = _require_name(self.name, "Site name")

    def update(self, name: str, location: Optional[str], is_active: bool) -> None:
        self.name = _require_name(name, "Site name")
        self.location = location
        self.is_active = is_active


@dataclass(eq=False)
class Reagent:
    name: str
    description: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        self.name = _require_name(self.name, "Reagent name")


@dataclass(eq=False)
class Lot:
    lot_number: str
    reagent_id: int
    expiration_date: date
    id: Optional[int] = None

    def __post_init__(self):
        self.lot_number = _require_name(self.lot_number, "Lot number")
        if self.expiration_date is None:
            raise InvalidEntity("Expiration date is required")


@dataclass(eq=False)
class Shipment:
    """A delivery of one lot to one site. Unreceived while received_date is None."""
    lot_id: int
    site_id: int
    quantity: int
    shipped_date: date
    received_date: Optional[date] = None
    id: Optional[int] = None
    events: List = field(default_factory=list)

    def __post_init__(self):
        if self.quantity is None or self.quantity <= 0:
            raise InvalidMovement("Quantity must be greater than 0")
        if self.received_date is not None and self.received_date < self.shipped_date:
            raise InvalidMovement("Received date cannot be before shipped date")

    @property
    def is_received(self) -> bool:
        return self.received_date is not None

    def receive(self, received_date: date) -> None:
        """Mark the shipment as arrived and raise ShipmentReceived."""
        if self.is_received:
            raise InvalidMovement(f"Shipment {self.id} was already received on {self.received_date}")
        if received_date < self.shipped_date:
            raise InvalidMovement("Received date cannot be before shipped date")

        self.received_date = received_date
        self.events.append(
            ShipmentReceived(
                lot_id=self.lot_id,
                site_id=self.site_id,
                quantity=self.quantity,
                received_date=received_date,
            )
        )


@dataclass(eq=False)
class Transfer:
    lot_id: int
    from_site_id: int
    to_site_id: int
    quantity: int
    transfer_date: date
    id: Optional[int] = None
    events: List = field(default_factory=list)

    def __post_init__(self):
        if self.from_site_id == self.to_site_id:
            raise InvalidMovement("From and To sites must be different")
        if self.quantity is None or self.quantity <= 0:
            raise InvalidMovement("Quantity must be greater than 0")

    def record(self) -> None:
        self.events.append(
            TransferRecorded(
                lot_id=self.lot_id,
                from_site_id=self.from_site_id,
                to_site_id=self.to_site_id,
                quantity=self.quantity,
                transfer_date=self.transfer_date,
            )
        )


@dataclass(eq=False)
class InventoryRecord:
    """A physical count of one lot at one site. Counts replace, never adjust."""
    lot_id: int
    site_id: int
    quantity_on_hand: int
    recorded_date: date
    recorded_by: str
    id: Optional[int] = None
    events: List = field(default_factory=list)

    def __post_init__(self):
        if self.quantity_on_hand is None or self.quantity_on_hand < 0:
            raise InvalidMovement("Quantity must be 0 or greater")
        if not self.recorded_by or not self.recorded_by.strip():
            raise InvalidMovement("Recorded by is required")
        self.recorded_by = self.recorded_by.strip()

    def record(self) -> None:
        self.events.append(
            InventoryRecorded(
                lot_id=self.lot_id,
                site_id=self.site_id,
                quantity_on_hand=self.quantity_on_hand,
                recorded_date=self.recorded_date,
                recorded_by=self.recorded_by,
            )
        )
