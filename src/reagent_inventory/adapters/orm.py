import logging
from sqlalchemy import (
    Table,
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    event,
    func,
    true,
)
from sqlalchemy.orm import registry
from reagent_inventory.domain import model

logger = logging.getLogger(__name__)

# SQLAlchemy 2.0 pattern: use registry
mapper_registry = registry()
metadata = mapper_registry.metadata

sites = Table(
    "sites",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("location", String(255)),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp()),
)

reagents = Table(
    "reagents",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("description", Text),
)

lots = Table(
    "lots",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lot_number", String(255), nullable=False, unique=True),
    Column("reagent_id", Integer, ForeignKey("reagents.id"), nullable=False),
    Column("expiration_date", Date, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp()),
)

shipments = Table(
    "shipments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lot_id", Integer, ForeignKey("lots.id"), nullable=False),
    Column("site_id", Integer, ForeignKey("sites.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("shipped_date", Date, nullable=False),
    Column("received_date", Date),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp()),
)

transfers = Table(
    "transfers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lot_id", Integer, ForeignKey("lots.id"), nullable=False),
    Column("from_site_id", Integer, ForeignKey("sites.id"), nullable=False),
    Column("to_site_id", Integer, ForeignKey("sites.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("transfer_date", Date, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp()),
)

# Snapshots: physical counts, never edited in place
inventory_records = Table(
    "inventory_records",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lot_id", Integer, ForeignKey("lots.id"), nullable=False),
    Column("site_id", Integer, ForeignKey("sites.id"), nullable=False),
    Column("quantity_on_hand", Integer, nullable=False),
    Column("recorded_date", Date, nullable=False),
    Column("recorded_by", String(255), nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
)

# Entities that raise domain events need an events list after loading
EVENT_SOURCES = (model.Shipment, model.Transfer, model.InventoryRecord)


def start_mappers():
    if mapper_registry.mappers:
        return

    logger.info("Starting mappers")
    mapper_registry.map_imperatively(model.Site, sites)
    mapper_registry.map_imperatively(model.Reagent, reagents)
    mapper_registry.map_imperatively(model.Lot, lots)
    mapper_registry.map_imperatively(model.Shipment, shipments)
    mapper_registry.map_imperatively(model.Transfer, transfers)
    mapper_registry.map_imperatively(model.InventoryRecord, inventory_records)

    for entity in EVENT_SOURCES:
        if not event.contains(entity, "load", receive_load):
            event.listen(entity, "load", receive_load)


def receive_load(entity, _):
    entity.events = []
