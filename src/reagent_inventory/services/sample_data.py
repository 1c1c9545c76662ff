"""
Sample data for demos and manual testing.

Builds one simulated year ending at a base date: five sites, eight reagents
with two or three lots each, a quarterly 50-box shipment of every lot to every
site, optional random transfers between sites and roughly monthly inventory
counts. Usage is set so a site would burn through about 95% of a year's
deliveries.

The plan is built from plain names first and only then pushed through the
message bus, so the same rules apply as for hand-entered data.
"""
import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from reagent_inventory.adapters import orm
from reagent_inventory.domain import commands
from reagent_inventory.service_layer import messagebus
from reagent_inventory.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

SITES = [
    ("Lab A", "Building 1, Floor 2"),
    ("Lab B", "Building 1, Floor 3"),
    ("Lab C", "Building 2, Floor 1"),
    ("Storage Facility", "Building 3"),
    ("Research Lab", "Building 2, Floor 2"),
]

REAGENTS = [
    ("Sodium Chloride", "Common salt, NaCl"),
    ("Ethanol", "95% ethyl alcohol"),
    ("Hydrochloric Acid", "HCl, 1M solution"),
    ("Glucose", "D-glucose, analytical grade"),
    ("Buffer Solution", "pH 7.4 phosphate buffer"),
    ("Acetone", "HPLC grade acetone"),
    ("Methanol", "Analytical grade methanol"),
    ("Potassium Hydroxide", "KOH pellets"),
]

USERS = ["Alice", "Bob", "Charlie", "Diana", "Eve"]

BOXES_PER_SHIPMENT = 50
SHIPMENT_INTERVAL_DAYS = 90
SHIPMENTS_PER_YEAR = 4
SHIPPING_DAYS = 7
DAILY_USAGE = BOXES_PER_SHIPMENT * SHIPMENTS_PER_YEAR * 0.95 / 365


@dataclass
class SamplePlan:
    """Rows to seed, cross-referenced by site name and lot number."""
    sites: List[Dict[str, Any]] = field(default_factory=list)
    reagents: List[Dict[str, Any]] = field(default_factory=list)
    lots: List[Dict[str, Any]] = field(default_factory=list)
    shipments: List[Dict[str, Any]] = field(default_factory=list)
    transfers: List[Dict[str, Any]] = field(default_factory=list)
    inventory_records: List[Dict[str, Any]] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            "sites": len(self.sites),
            "reagents": len(self.reagents),
            "lots": len(self.lots),
            "shipments": len(self.shipments),
            "transfers": len(self.transfers),
            "inventory_records": len(self.inventory_records),
        }


def expected_received(plan: SamplePlan, lot_number: str, site: str, as_of: date) -> int:
    """
    Stock that has reached a site/lot pair by a date.

    Counts shipments received on or before the date plus transfers in, minus
    transfers out, dated on or before it. Later transfers do not count at all.
    """
    total = sum(
        s["quantity"]
        for s in plan.shipments
        if s["lot_number"] == lot_number and s["site"] == site
        and s["received_date"] is not None and s["received_date"] <= as_of
    )
    for t in plan.transfers:
        if t["lot_number"] != lot_number or t["transfer_date"] > as_of:
            continue
        if t["to_site"] == site:
            total += t["quantity"]
        if t["from_site"] == site:
            total -= t["quantity"]
    return total


def build_sample_plan(
    base_date: date,
    rng: Optional[random.Random] = None,
    include_transfers: bool = True,
) -> SamplePlan:
    rng = rng or random.Random()
    plan = SamplePlan()
    year_start = base_date - timedelta(days=365)

    plan.sites = [dict(name=name, location=location) for name, location in SITES]
    plan.reagents = [dict(name=name, description=description) for name, description in REAGENTS]
    site_names = [s["name"] for s in plan.sites]

    # Some lots already expired, some expiring soon, most far out
    for i, reagent in enumerate(plan.reagents):
        for j in range(1, rng.randint(2, 3) + 1):
            plan.lots.append(
                dict(
                    lot_number=f"LOT{i + 1}{j:02d}{base_date.year}",
                    reagent=reagent["name"],
                    expiration_date=base_date + timedelta(days=rng.randrange(-100, 300)),
                )
            )

    for lot in plan.lots:
        for site in site_names:
            for quarter in range(SHIPMENTS_PER_YEAR):
                arrival = year_start + timedelta(days=quarter * SHIPMENT_INTERVAL_DAYS)
                plan.shipments.append(
                    dict(
                        lot_number=lot["lot_number"],
                        site=site,
                        quantity=BOXES_PER_SHIPMENT,
                        shipped_date=arrival - timedelta(days=SHIPPING_DAYS),
                        received_date=arrival if arrival <= base_date else None,
                    )
                )

    if include_transfers:
        for _ in range(int(len(plan.lots) * len(site_names) * 0.1)):
            lot = rng.choice(plan.lots)
            from_site, to_site = rng.sample(site_names, 2)
            plan.transfers.append(
                dict(
                    lot_number=lot["lot_number"],
                    from_site=from_site,
                    to_site=to_site,
                    quantity=rng.randint(5, 19),
                    transfer_date=base_date - timedelta(days=rng.randint(30, 209)),
                )
            )

    days_since_start = (base_date - year_start).days
    for lot in plan.lots:
        for site in site_names:
            if expected_received(plan, lot["lot_number"], site, base_date) <= 0:
                continue

            for _ in range(days_since_start // 30 + rng.randrange(3)):
                recorded_date = base_date - timedelta(days=rng.randrange(min(days_since_start, 350)))
                used = max(0.0, (recorded_date - year_start).days * DAILY_USAGE)
                received = expected_received(plan, lot["lot_number"], site, recorded_date)
                remaining = max(0.0, received - used)
                # +/-10% counting noise, never reported as empty
                counted = max(1, int(remaining * rng.uniform(0.9, 1.1)))
                plan.inventory_records.append(
                    dict(
                        lot_number=lot["lot_number"],
                        site=site,
                        quantity_on_hand=counted,
                        recorded_date=recorded_date,
                        recorded_by=rng.choice(USERS),
                    )
                )

    logger.info(f"Built sample plan as of {base_date}: {plan.counts()}")
    return plan


def reset_database(engine):
    """Drop and recreate every inventory table."""
    logger.warning("Dropping all inventory tables")
    orm.metadata.drop_all(engine)
    orm.metadata.create_all(engine)


def seed(plan: SamplePlan, uow: AbstractUnitOfWork) -> Dict[str, int]:
    """Dispatch the plan through the message bus. Returns row counts."""

    def dispatch(cmd):
        return messagebus.handle(cmd, uow)[0]

    site_ids = {
        s["name"]: dispatch(commands.CreateSite(name=s["name"], location=s["location"]))
        for s in plan.sites
    }
    reagent_ids = {
        r["name"]: dispatch(commands.CreateReagent(name=r["name"], description=r["description"]))
        for r in plan.reagents
    }
    lot_ids = {
        lot["lot_number"]: dispatch(
            commands.CreateLot(
                lot_number=lot["lot_number"],
                reagent_id=reagent_ids[lot["reagent"]],
                expiration_date=lot["expiration_date"],
            )
        )
        for lot in plan.lots
    }

    for s in plan.shipments:
        dispatch(
            commands.RecordShipment(
                lot_id=lot_ids[s["lot_number"]],
                site_id=site_ids[s["site"]],
                quantity=s["quantity"],
                shipped_date=s["shipped_date"],
                received_date=s["received_date"],
            )
        )
    for t in plan.transfers:
        dispatch(
            commands.RecordTransfer(
                lot_id=lot_ids[t["lot_number"]],
                from_site_id=site_ids[t["from_site"]],
                to_site_id=site_ids[t["to_site"]],
                quantity=t["quantity"],
                transfer_date=t["transfer_date"],
            )
        )
    for ir in plan.inventory_records:
        dispatch(
            commands.RecordInventory(
                lot_id=lot_ids[ir["lot_number"]],
                site_id=site_ids[ir["site"]],
                quantity_on_hand=ir["quantity_on_hand"],
                recorded_date=ir["recorded_date"],
                recorded_by=ir["recorded_by"],
            )
        )

    counts = plan.counts()
    logger.info(f"Seeded sample data: {counts}")
    return counts
