"""Unit tests for dashboard risk-alert classification."""
from datetime import date

from reagent_inventory.services import risk_alerts

TODAY = date(2024, 6, 1)


def latest_count(quantity, expiration_date, site_name="Lab A"):
    return {
        "lot_id": 3,
        "site_id": 7,
        "quantity_on_hand": quantity,
        "recorded_date": date(2024, 5, 20),
        "expiration_date": expiration_date,
        "site_name": site_name,
        "reagent_name": "Ethanol",
        "lot_number": "LOT201",
    }


class TestClassify:

    def test_expired_with_stock_is_an_error(self):
        alert = risk_alerts.classify(latest_count(12, date(2024, 5, 22)), TODAY)
        assert alert.type == "expired"
        assert alert.severity == "error"
        assert alert.id == "expired_3_7"
        assert alert.message == "Expired 10 days ago, still has 12 units"
        assert alert.expiration_date == date(2024, 5, 22)

    def test_expiring_within_window_is_a_warning(self):
        alert = risk_alerts.classify(latest_count(40, date(2024, 7, 1)), TODAY)
        assert alert.type == "expiring_soon"
        assert alert.severity == "warning"
        assert alert.message == "Expires in 30 day(s), 40 units remaining"

    def test_expiring_today_counts_as_expiring(self):
        alert = risk_alerts.classify(latest_count(40, TODAY), TODAY)
        assert alert.type == "expiring_soon"

    def test_expiry_wins_over_low_stock(self):
        alert = risk_alerts.classify(latest_count(2, date(2024, 6, 5)), TODAY)
        assert alert.type == "expiring_soon"

    def test_low_stock(self):
        alert = risk_alerts.classify(latest_count(4, date(2025, 1, 1)), TODAY)
        assert alert.type == "low_stock"
        assert alert.severity == "warning"
        assert alert.last_quantity == 4
        assert alert.last_recorded == date(2024, 5, 20)

    def test_threshold_is_exclusive(self):
        assert risk_alerts.classify(latest_count(5, date(2025, 1, 1)), TODAY) is None

    def test_custom_thresholds(self):
        record = latest_count(8, date(2024, 8, 1))
        assert risk_alerts.classify(record, TODAY) is None
        alert = risk_alerts.classify(record, TODAY, low_stock=10, expiry_warning_days=90)
        assert alert.type == "expiring_soon"

    def test_empty_stock_never_alerts(self):
        assert risk_alerts.classify(latest_count(0, date(2024, 1, 1)), TODAY) is None
        assert risk_alerts.classify(latest_count(0, date(2025, 1, 1)), TODAY) is None


def test_stale_site_alert():
    never = risk_alerts.stale_site_alert(4, "Lab C", None)
    assert never.type == "no_recent_inventory"
    assert never.severity == "info"
    assert never.message == "No inventory has ever been recorded"

    old = risk_alerts.stale_site_alert(4, "Lab C", date(2024, 3, 1))
    assert old.to_dict()["last_recorded"] == "2024-03-01"
    assert old.to_dict()["expiration_date"] is None


def test_sort_by_severity_then_site_name():
    alerts = [
        risk_alerts.stale_site_alert(1, "Archive", None),
        risk_alerts.classify(latest_count(4, date(2025, 1, 1), "Lab B"), TODAY),
        risk_alerts.classify(latest_count(4, date(2025, 1, 1), "lab a"), TODAY),
        risk_alerts.classify(latest_count(9, date(2024, 1, 1), "Zoo"), TODAY),
    ]
    ordered = risk_alerts.sort_alerts(alerts)
    assert [(a.severity, a.site_name) for a in ordered] == [
        ("error", "Zoo"),
        ("warning", "lab a"),
        ("warning", "Lab B"),
        ("info", "Archive"),
    ]
