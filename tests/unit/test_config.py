"""Unit tests for environment-driven settings."""
import config


def test_database_uri_prefers_db_url(monkeypatch):
    monkeypatch.setenv("DB_URL", "sqlite:///custom.db")
    monkeypatch.setenv("DB_HOST", "db")
    assert config.get_database_uri() == "sqlite:///custom.db"


def test_database_uri_builds_postgres_from_host(monkeypatch):
    monkeypatch.delenv("DB_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_USER", "lab")
    monkeypatch.setenv("DB_PASSWORD", "secret")
    monkeypatch.delenv("DB_PORT", raising=False)
    monkeypatch.delenv("DB_NAME", raising=False)
    assert config.get_database_uri() == "postgresql://lab:secret@db:5432/inventory_db"


def test_database_uri_falls_back_to_sqlite(monkeypatch):
    for name in ("DB_URL", "DB_HOST", "INVENTORY_DB_PATH"):
        monkeypatch.delenv(name, raising=False)
    assert config.get_database_uri() == "sqlite:///inventory.db"


def test_redis_host_and_port(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "cache")
    monkeypatch.setenv("REDIS_PORT", "6380")
    assert config.get_redis_host_and_port() == dict(host="cache", port=6380)


def test_reports_api_url_falls_back_to_api_host(monkeypatch):
    monkeypatch.delenv("REPORTS_API_HOST", raising=False)
    monkeypatch.delenv("REPORTS_API_PORT", raising=False)
    monkeypatch.setenv("API_HOST", "inventory")
    assert config.get_reports_api_url() == "http://inventory:8001"


def test_alert_thresholds_defaults(monkeypatch):
    for name in ("LOW_STOCK_THRESHOLD", "EXPIRY_WARNING_DAYS", "STALE_INVENTORY_DAYS"):
        monkeypatch.delenv(name, raising=False)
    assert config.get_alert_thresholds() == dict(
        low_stock=5, expiry_warning_days=30, stale_inventory_days=30
    )
