"""
Risk alerts for the dashboard.

Each site/lot pair is judged on its most recent inventory count only: a lot
past its expiration date that still has stock, a lot about to expire, or a
count below the low-stock threshold. Sites that have not been counted for a
while get an informational alert of their own.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}


@dataclass
class RiskAlert:
    id: str
    type: str
    severity: str
    site_name: str
    reagent_name: str
    lot_number: str
    message: str
    last_quantity: Optional[int] = None
    expiration_date: Optional[date] = None
    last_recorded: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("expiration_date", "last_recorded"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


def classify(
    record: Dict[str, Any],
    today: date,
    low_stock: int = 5,
    expiry_warning_days: int = 30,
) -> Optional[RiskAlert]:
    """
    Judge the latest count of one site/lot pair.

    Expects lot_id, site_id, quantity_on_hand, recorded_date, expiration_date
    (as dates), site_name, reagent_name and lot_number. Returns at most one
    alert; expiry takes precedence over low stock.
    """
    quantity = record["quantity_on_hand"]
    if quantity <= 0:
        return None

    days_until_expiration = (record["expiration_date"] - today).days
    pair = f"{record['lot_id']}_{record['site_id']}"
    common = dict(
        site_name=record["site_name"],
        reagent_name=record["reagent_name"],
        lot_number=record["lot_number"],
        last_quantity=quantity,
    )

    if days_until_expiration < 0:
        return RiskAlert(
            id=f"expired_{pair}",
            type="expired",
            severity="error",
            message=f"Expired {abs(days_until_expiration)} days ago, still has {quantity} units",
            expiration_date=record["expiration_date"],
            **common,
        )

    if days_until_expiration <= expiry_warning_days:
        return RiskAlert(
            id=f"expiring_{pair}",
            type="expiring_soon",
            severity="warning",
            message=f"Expires in {days_until_expiration} day(s), {quantity} units remaining",
            expiration_date=record["expiration_date"],
            **common,
        )

    if quantity < low_stock:
        return RiskAlert(
            id=f"low_stock_{pair}",
            type="low_stock",
            severity="warning",
            message=f"Low stock: only {quantity} units remaining",
            last_recorded=record["recorded_date"],
            **common,
        )

    return None


def stale_site_alert(site_id: int, site_name: str, last_recorded: Optional[date]) -> RiskAlert:
    """Informational alert for a site without a recent count."""
    if last_recorded is None:
        message = "No inventory has ever been recorded"
    else:
        message = f"Last inventory recorded on {last_recorded.isoformat()}"

    return RiskAlert(
        id=f"no_recent_{site_id}",
        type="no_recent_inventory",
        severity="info",
        site_name=site_name,
        reagent_name="All reagents",
        lot_number="All lots",
        message=message,
        last_recorded=last_recorded,
    )


def sort_alerts(alerts: List[RiskAlert]) -> List[RiskAlert]:
    """Errors first, then warnings, then info; by site name within a severity."""
    return sorted(alerts, key=lambda a: (SEVERITY_ORDER[a.severity], a.site_name.lower()))
