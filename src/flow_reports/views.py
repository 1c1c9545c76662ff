"""
Views for cumulative-flow reports - read only.

Loads events for the selected lot (optionally narrowed to one site) up to the
"view as of" date, replays them and returns a JSON-ready report.
"""
import logging
from typing import Any, Dict, Optional
from datetime import date
from sqlalchemy import text

from flow_reports.adapters.event_loader import SqlEventLoader
from flow_reports.domain import reconstructor
from reagent_inventory.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


def _describe(site: Optional[Dict[str, Any]], lot: Dict[str, Any]) -> str:
    """Filter chip text shown above the chart."""
    lot_part = f"Lot: {lot['reagent_name']} - {lot['lot_number']}"
    if site is None:
        return f"{lot_part} (All Sites)"
    return f"Site: {site['name']}, {lot_part}"


def get_cumulative_flow(
    lot_id: int,
    site_id: Optional[int],
    as_of: Optional[date],
    uow,
) -> Dict[str, Any]:
    """
    Reconstruct the cumulative-flow series for a lot.

    With a site the series covers that site/lot pair only; without one,
    every event type is summed per date across all sites. as_of defaults
    to today; events after it are left out entirely.

    Returns:
        - data_points: one entry per event, in timeline order
        - stats: usage statistics, or None when there are no events
        - scope: "site" or "all_sites"
        - as_of / description

    Raises NotFound for an unknown lot, or an unknown site when one is given.
    """
    as_of = as_of or date.today()

    with uow:
        session = uow.session
        lot = session.execute(
            text("""
                SELECT l.id, l.lot_number, r.name AS reagent_name
                FROM lots l JOIN reagents r ON l.reagent_id = r.id
                WHERE l.id = :lot_id
            """),
            dict(lot_id=lot_id),
        ).mappings().first()
        if lot is None:
            raise NotFound(f"Lot {lot_id} not found")

        site = None
        if site_id:
            site = session.execute(
                text("SELECT id, name FROM sites WHERE id = :site_id"), dict(site_id=site_id)
            ).mappings().first()
            if site is None:
                raise NotFound(f"Site {site_id} not found")

        loader = SqlEventLoader(session)
        if site_id:
            collections = loader.load_scoped(site_id, lot_id, as_of)
        else:
            collections = loader.load_aggregated(lot_id, as_of)

    report = reconstructor.reconstruct(**collections.as_events())
    logger.info(
        f"Cumulative flow for lot {lot_id}, site {site_id or 'all'}: "
        f"{len(report.data_points)} data points as of {as_of}"
    )

    result = report.to_dict()
    result.update(
        {
            "scope": "site" if site_id else "all_sites",
            "lot_id": lot_id,
            "site_id": site_id or None,
            "as_of": as_of.isoformat(),
            "description": _describe(dict(site) if site else None, dict(lot)),
        }
    )
    return result


def get_report_options(uow) -> Dict[str, Any]:
    """Active sites and all lots for the report filters."""
    with uow:
        session = uow.session
        sites = session.execute(
            text("SELECT id, name FROM sites WHERE is_active = :active ORDER BY name"),
            dict(active=True),
        ).mappings().all()
        lots = session.execute(
            text("""
                SELECT l.id, l.lot_number, r.name AS reagent_name
                FROM lots l
                JOIN reagents r ON l.reagent_id = r.id
                ORDER BY r.name, l.lot_number
            """)
        ).mappings().all()

        return {
            "sites": [dict(s) for s in sites],
            "lots": [dict(lot) for lot in lots],
        }
