"""
Views for read operations - separate from command/write path.

Listings join in site, reagent and lot names for display. The dashboard
queries take an explicit "today" so they can be replayed for any date.
"""
import logging
from typing import Any, Dict, List, Optional
from datetime import date, datetime, timedelta
from sqlalchemy import Date, bindparam, text

import config
from reagent_inventory.service_layer.unit_of_work import AbstractUnitOfWork
from reagent_inventory.services import risk_alerts

logger = logging.getLogger(__name__)


def _as_date(value) -> Optional[date]:
    """Raw text() rows hold strings on SQLite and dates on PostgreSQL."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _serialize(row) -> Dict[str, Any]:
    data = dict(row)
    for key, value in data.items():
        if isinstance(value, (date, datetime)):
            data[key] = value.isoformat()
    return data


def _select(uow: AbstractUnitOfWork, sql: str, **params) -> List[Dict[str, Any]]:
    with uow:
        rows = uow.session.execute(text(sql), params).mappings().all()
        return [_serialize(row) for row in rows]


def list_sites(uow: AbstractUnitOfWork, active_only: bool = False) -> List[Dict[str, Any]]:
    where = "WHERE is_active = :active" if active_only else ""
    sql = f"SELECT id, name, location, is_active FROM sites {where} ORDER BY name"
    params = dict(active=True) if active_only else {}
    return _select(uow, sql, **params)


def list_reagents(uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    return _select(uow, "SELECT id, name, description FROM reagents ORDER BY name")


def list_lots(uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    return _select(
        uow,
        """
        SELECT l.id, l.lot_number, l.reagent_id, l.expiration_date, r.name AS reagent_name
        FROM lots l
        JOIN reagents r ON l.reagent_id = r.id
        ORDER BY r.name, l.lot_number
        """,
    )


def list_shipments(uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    return _select(
        uow,
        """
        SELECT sh.id, sh.lot_id, sh.site_id, sh.quantity, sh.shipped_date, sh.received_date,
               s.name AS site_name, r.name AS reagent_name, l.lot_number, l.expiration_date
        FROM shipments sh
        JOIN sites s ON sh.site_id = s.id
        JOIN lots l ON sh.lot_id = l.id
        JOIN reagents r ON l.reagent_id = r.id
        ORDER BY sh.shipped_date DESC, sh.id DESC
        """,
    )


def list_transfers(uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    return _select(
        uow,
        """
        SELECT t.id, t.lot_id, t.from_site_id, t.to_site_id, t.quantity, t.transfer_date,
               sf.name AS from_site_name, st.name AS to_site_name,
               r.name AS reagent_name, l.lot_number, l.expiration_date
        FROM transfers t
        JOIN sites sf ON t.from_site_id = sf.id
        JOIN sites st ON t.to_site_id = st.id
        JOIN lots l ON t.lot_id = l.id
        JOIN reagents r ON l.reagent_id = r.id
        ORDER BY t.transfer_date DESC, t.id DESC
        """,
    )


def list_inventory_records(uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    return _select(
        uow,
        """
        SELECT ir.id, ir.lot_id, ir.site_id, ir.quantity_on_hand, ir.recorded_date, ir.recorded_by,
               s.name AS site_name, r.name AS reagent_name, l.lot_number, l.expiration_date
        FROM inventory_records ir
        JOIN sites s ON ir.site_id = s.id
        JOIN lots l ON ir.lot_id = l.id
        JOIN reagents r ON l.reagent_id = r.id
        ORDER BY ir.recorded_date DESC, ir.id DESC
        """,
    )


LATEST_RECORDS = text("""
    SELECT ir.lot_id, ir.site_id, ir.quantity_on_hand, ir.recorded_date,
           s.name AS site_name, r.name AS reagent_name, l.lot_number, l.expiration_date
    FROM inventory_records ir
    JOIN sites s ON ir.site_id = s.id
    JOIN lots l ON ir.lot_id = l.id
    JOIN reagents r ON l.reagent_id = r.id
    WHERE s.is_active = :active
      AND ir.recorded_date <= :today
      AND ir.id = (
          SELECT ir2.id
          FROM inventory_records ir2
          WHERE ir2.lot_id = ir.lot_id AND ir2.site_id = ir.site_id
            AND ir2.recorded_date <= :today
          ORDER BY ir2.recorded_date DESC, ir2.id DESC
          LIMIT 1
      )
""").bindparams(bindparam("today", type_=Date))

STALE_SITES = text("""
    SELECT s.id, s.name AS site_name, MAX(ir.recorded_date) AS last_recorded
    FROM sites s
    LEFT JOIN inventory_records ir ON s.id = ir.site_id AND ir.recorded_date <= :today
    WHERE s.is_active = :active
    GROUP BY s.id, s.name
    HAVING MAX(ir.recorded_date) IS NULL OR MAX(ir.recorded_date) < :since
    ORDER BY s.name
""").bindparams(bindparam("today", type_=Date), bindparam("since", type_=Date))

EXPIRED_LOTS = text(
    "SELECT COUNT(*) FROM lots WHERE expiration_date < :today"
).bindparams(bindparam("today", type_=Date))

EXPIRING_LOTS = text(
    "SELECT COUNT(*) FROM lots WHERE expiration_date BETWEEN :today AND :horizon"
).bindparams(bindparam("today", type_=Date), bindparam("horizon", type_=Date))


def get_risk_alerts(today: date, uow: AbstractUnitOfWork) -> List[Dict[str, Any]]:
    """
    Get dashboard risk alerts as of a given day.

    Returns alerts sorted by severity (error, warning, info), then site name.
    """
    thresholds = config.get_alert_thresholds()
    since = today - timedelta(days=thresholds["stale_inventory_days"])
    alerts = []

    with uow:
        session = uow.session

        latest = session.execute(LATEST_RECORDS, dict(today=today, active=True)).mappings().all()
        for row in latest:
            record = dict(row)
            record["recorded_date"] = _as_date(record["recorded_date"])
            record["expiration_date"] = _as_date(record["expiration_date"])
            alert = risk_alerts.classify(
                record,
                today,
                low_stock=thresholds["low_stock"],
                expiry_warning_days=thresholds["expiry_warning_days"],
            )
            if alert:
                alerts.append(alert)

        stale = session.execute(STALE_SITES, dict(today=today, since=since, active=True)).mappings().all()
        for row in stale:
            alerts.append(
                risk_alerts.stale_site_alert(row["id"], row["site_name"], _as_date(row["last_recorded"]))
            )

    logger.info(f"Computed {len(alerts)} risk alerts as of {today}")
    return [alert.to_dict() for alert in risk_alerts.sort_alerts(alerts)]


def get_dashboard_stats(today: date, uow: AbstractUnitOfWork) -> Dict[str, Any]:
    """
    Get headline counts for the dashboard as of a given day:

    - total_sites / total_lots
    - expired_lots: expiration date before today
    - expiring_soon_lots: expiring between today and the warning window
    - sites_with_low_stock: distinct sites carrying a low-stock alert
    - sites_without_recent_inventory: active sites not counted recently
    """
    thresholds = config.get_alert_thresholds()
    horizon = today + timedelta(days=thresholds["expiry_warning_days"])
    since = today - timedelta(days=thresholds["stale_inventory_days"])

    with uow:
        session = uow.session

        total_sites = session.execute(
            text("SELECT COUNT(*) FROM sites WHERE is_active = :active"), dict(active=True)
        ).scalar()
        total_lots = session.execute(text("SELECT COUNT(*) FROM lots")).scalar()
        expired_lots = session.execute(EXPIRED_LOTS, dict(today=today)).scalar()
        expiring_soon_lots = session.execute(
            EXPIRING_LOTS, dict(today=today, horizon=horizon)
        ).scalar()
        stale_sites = session.execute(STALE_SITES, dict(today=today, since=since, active=True)).all()

    alerts = get_risk_alerts(today, uow)
    low_stock_sites = {a["site_name"] for a in alerts if a["type"] == "low_stock"}

    return {
        "total_sites": total_sites or 0,
        "total_lots": total_lots or 0,
        "expired_lots": expired_lots or 0,
        "expiring_soon_lots": expiring_soon_lots or 0,
        "sites_with_low_stock": len(low_stock_sites),
        "sites_without_recent_inventory": len(stale_sites),
        "as_of": today.isoformat(),
    }
