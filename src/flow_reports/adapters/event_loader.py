"""
Event loader for cumulative-flow reports.

Fetches shipments, transfers and inventory snapshots for one lot, either at
a single site (scoped) or summed per date across all sites (aggregated), up
to and including the "view as of" date. Rows come back as plain records
({date, quantity, label}) and are turned into flow events here; the
reconstructor never touches the database.
"""
import abc
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Date, Integer, bindparam, text

from flow_reports.domain.model import EVENT_CLASSES, EventType, FlowEvent

logger = logging.getLogger(__name__)


def parse_event_date(value) -> Optional[date]:
    """Coerce a driver value to a calendar date. Unusable values give None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def to_flow_events(records: List[Dict[str, Any]], event_type: EventType) -> List[FlowEvent]:
    """Turn raw loader records into typed flow events, dropping undated ones."""
    event_cls = EVENT_CLASSES[event_type]
    events = []
    for record in records:
        event_date = parse_event_date(record.get("date"))
        if event_date is None:
            logger.debug("Skipping %s record without a usable date: %s", event_type.value, record)
            continue
        events.append(
            event_cls(
                date=event_date,
                quantity=int(record.get("quantity") or 0),
                label=record.get("label") or "",
            )
        )
    return events


@dataclass
class EventCollections:
    """The four raw record lists handed from the loader to the reconstructor."""
    shipments: List[Dict[str, Any]] = field(default_factory=list)
    transfers_in: List[Dict[str, Any]] = field(default_factory=list)
    transfers_out: List[Dict[str, Any]] = field(default_factory=list)
    snapshots: List[Dict[str, Any]] = field(default_factory=list)

    def as_events(self) -> Dict[str, List[FlowEvent]]:
        return dict(
            shipments=to_flow_events(self.shipments, EventType.SHIPMENT),
            transfers_in=to_flow_events(self.transfers_in, EventType.TRANSFER_IN),
            transfers_out=to_flow_events(self.transfers_out, EventType.TRANSFER_OUT),
            snapshots=to_flow_events(self.snapshots, EventType.SNAPSHOT),
        )

    def __len__(self):
        return (
            len(self.shipments) + len(self.transfers_in)
            + len(self.transfers_out) + len(self.snapshots)
        )


class AbstractEventLoader(abc.ABC):
    def load_scoped(self, site_id: int, lot_id: int, as_of: date) -> EventCollections:
        collections = self._load_scoped(site_id, lot_id, as_of)
        logger.info(
            f"Loaded {len(collections)} events for site {site_id}, lot {lot_id} as of {as_of}"
        )
        return collections

    def load_aggregated(self, lot_id: int, as_of: date) -> EventCollections:
        collections = self._load_aggregated(lot_id, as_of)
        logger.info(f"Loaded {len(collections)} aggregated events for lot {lot_id} as of {as_of}")
        return collections

    @abc.abstractmethod
    def _load_scoped(self, site_id: int, lot_id: int, as_of: date) -> EventCollections:
        raise NotImplementedError

    @abc.abstractmethod
    def _load_aggregated(self, lot_id: int, as_of: date) -> EventCollections:
        raise NotImplementedError


def _query(sql: str):
    params = [bindparam("as_of", type_=Date), bindparam("lot_id", type_=Integer)]
    if ":site_id" in sql:
        params.append(bindparam("site_id", type_=Integer))
    return text(sql).bindparams(*params)


SCOPED_SHIPMENTS = """
    SELECT sh.received_date AS date, sh.quantity AS quantity,
           s.name AS site_name, r.name AS reagent_name, l.lot_number AS lot_number
    FROM shipments sh
    JOIN sites s ON sh.site_id = s.id
    JOIN lots l ON sh.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE sh.site_id = :site_id AND sh.lot_id = :lot_id
      AND sh.received_date IS NOT NULL
      AND sh.received_date <= :as_of
    ORDER BY sh.received_date ASC, sh.id ASC
"""

SCOPED_TRANSFERS_IN = """
    SELECT t.transfer_date AS date, t.quantity AS quantity,
           s.name AS site_name, r.name AS reagent_name, l.lot_number AS lot_number
    FROM transfers t
    JOIN sites s ON t.to_site_id = s.id
    JOIN lots l ON t.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE t.to_site_id = :site_id AND t.lot_id = :lot_id AND t.transfer_date <= :as_of
    ORDER BY t.transfer_date ASC, t.id ASC
"""

SCOPED_TRANSFERS_OUT = """
    SELECT t.transfer_date AS date, -t.quantity AS quantity,
           s.name AS site_name, r.name AS reagent_name, l.lot_number AS lot_number
    FROM transfers t
    JOIN sites s ON t.from_site_id = s.id
    JOIN lots l ON t.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE t.from_site_id = :site_id AND t.lot_id = :lot_id AND t.transfer_date <= :as_of
    ORDER BY t.transfer_date ASC, t.id ASC
"""

SCOPED_SNAPSHOTS = """
    SELECT ir.recorded_date AS date, ir.quantity_on_hand AS quantity,
           s.name AS site_name, r.name AS reagent_name, l.lot_number AS lot_number
    FROM inventory_records ir
    JOIN sites s ON ir.site_id = s.id
    JOIN lots l ON ir.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE ir.site_id = :site_id AND ir.lot_id = :lot_id AND ir.recorded_date <= :as_of
    ORDER BY ir.recorded_date ASC, ir.id ASC
"""

AGGREGATED_SHIPMENTS = """
    SELECT sh.received_date AS date, SUM(sh.quantity) AS quantity,
           r.name AS reagent_name, l.lot_number AS lot_number
    FROM shipments sh
    JOIN lots l ON sh.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE sh.lot_id = :lot_id
      AND sh.received_date IS NOT NULL
      AND sh.received_date <= :as_of
    GROUP BY sh.received_date, r.name, l.lot_number
    ORDER BY sh.received_date ASC
"""

# Across all sites every transfer leaves one site and enters another, so
# the in and out sums for a date cancel each other out in the replay.
AGGREGATED_TRANSFERS_IN = """
    SELECT t.transfer_date AS date, SUM(t.quantity) AS quantity,
           r.name AS reagent_name, l.lot_number AS lot_number
    FROM transfers t
    JOIN lots l ON t.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE t.lot_id = :lot_id AND t.transfer_date <= :as_of
    GROUP BY t.transfer_date, r.name, l.lot_number
    ORDER BY t.transfer_date ASC
"""

AGGREGATED_TRANSFERS_OUT = """
    SELECT t.transfer_date AS date, -SUM(t.quantity) AS quantity,
           r.name AS reagent_name, l.lot_number AS lot_number
    FROM transfers t
    JOIN lots l ON t.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE t.lot_id = :lot_id AND t.transfer_date <= :as_of
    GROUP BY t.transfer_date, r.name, l.lot_number
    ORDER BY t.transfer_date ASC
"""

AGGREGATED_SNAPSHOTS = """
    SELECT ir.recorded_date AS date, SUM(ir.quantity_on_hand) AS quantity,
           r.name AS reagent_name, l.lot_number AS lot_number
    FROM inventory_records ir
    JOIN lots l ON ir.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE ir.lot_id = :lot_id AND ir.recorded_date <= :as_of
    GROUP BY ir.recorded_date, r.name, l.lot_number
    ORDER BY ir.recorded_date ASC
"""


class SqlEventLoader(AbstractEventLoader):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _fetch(self, sql: str, params: Dict[str, Any], label_format: str) -> List[Dict[str, Any]]:
        rows = self.session.execute(_query(sql), params).mappings().all()
        return [
            {
                "date": row["date"],
                "quantity": row["quantity"],
                "label": label_format.format(**row),
            }
            for row in rows
        ]

    def _load_scoped(self, site_id, lot_id, as_of):
        params = dict(site_id=site_id, lot_id=lot_id, as_of=as_of)
        label = "{reagent_name} - {lot_number} @ {site_name}"
        return EventCollections(
            shipments=self._fetch(SCOPED_SHIPMENTS, params, label),
            transfers_in=self._fetch(SCOPED_TRANSFERS_IN, params, label),
            transfers_out=self._fetch(SCOPED_TRANSFERS_OUT, params, label),
            snapshots=self._fetch(SCOPED_SNAPSHOTS, params, label),
        )

    def _load_aggregated(self, lot_id, as_of):
        params = dict(lot_id=lot_id, as_of=as_of)
        label = "{reagent_name} - {lot_number} (All Sites)"
        return EventCollections(
            shipments=self._fetch(AGGREGATED_SHIPMENTS, params, label),
            transfers_in=self._fetch(AGGREGATED_TRANSFERS_IN, params, label),
            transfers_out=self._fetch(AGGREGATED_TRANSFERS_OUT, params, label),
            snapshots=self._fetch(AGGREGATED_SNAPSHOTS, params, label),
        )
