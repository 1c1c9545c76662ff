"""Value objects for cumulative-flow reports.

A report is built fresh for every filter selection and discarded after
rendering; nothing here is persisted or mutated after construction.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import ClassVar, List, Optional


class EventType(str, Enum):
    """Tag carried by every flow event and copied onto its data point."""
    SHIPMENT = "shipment"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    SNAPSHOT = "inventory"


@dataclass(frozen=True)
class FlowEvent:
    """Base of the closed event union: Shipment, TransferIn, TransferOut, Snapshot."""
    date: date
    quantity: int
    label: str = ""

    event_type: ClassVar[EventType]


@dataclass(frozen=True)
class Shipment(FlowEvent):
    """Shipment received at a site. Quantity is positive."""
    event_type: ClassVar[EventType] = EventType.SHIPMENT


@dataclass(frozen=True)
class TransferIn(FlowEvent):
    """Stock moved in from another site. Quantity is positive."""
    event_type: ClassVar[EventType] = EventType.TRANSFER_IN


@dataclass(frozen=True)
class TransferOut(FlowEvent):
    """Stock moved out to another site. Quantity is already negated."""
    event_type: ClassVar[EventType] = EventType.TRANSFER_OUT


@dataclass(frozen=True)
class Snapshot(FlowEvent):
    """Physical count of stock on hand. Quantity is absolute, not a delta."""
    event_type: ClassVar[EventType] = EventType.SNAPSHOT


EVENT_CLASSES = {
    EventType.SHIPMENT: Shipment,
    EventType.TRANSFER_IN: TransferIn,
    EventType.TRANSFER_OUT: TransferOut,
    EventType.SNAPSHOT: Snapshot,
}


@dataclass(frozen=True)
class DataPoint:
    date: date
    cumulative_received: int
    cumulative_used: int
    current_inventory: int
    event_type: EventType
    event_details: str

    def to_dict(self):
        return {
            "date": self.date.isoformat(),
            "cumulative_received": self.cumulative_received,
            "cumulative_used": self.cumulative_used,
            "current_inventory": self.current_inventory,
            "event_type": self.event_type.value,
            "event_details": self.event_details,
        }


@dataclass(frozen=True)
class UsageStats:
    total_consumed: float
    average_daily_usage: float
    days_of_data: int
    projected_days_remaining: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class FlowReport:
    """Reconstructed series plus its summary.

    stats is None when there are no data points, so callers can tell
    "no data" apart from "zero usage".
    """
    data_points: List[DataPoint] = field(default_factory=list)
    stats: Optional[UsageStats] = None

    def to_dict(self):
        return {
            "data_points": [p.to_dict() for p in self.data_points],
            "stats": self.stats.to_dict() if self.stats else None,
        }
