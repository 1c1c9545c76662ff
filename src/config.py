"""Configuration settings for the reagent inventory tracker."""

import os


def get_database_uri():
    """Get database connection URI from environment variables.

    DB_URL wins if set. With DB_HOST set a PostgreSQL URI is built,
    otherwise the local SQLite file is used.
    """
    url = os.environ.get("DB_URL")
    if url:
        return url

    host = os.environ.get("DB_HOST")
    if host:
        port = os.environ.get("DB_PORT", "5432")
        password = os.environ.get("DB_PASSWORD", "inventory_pass")
        user = os.environ.get("DB_USER", "inventory_user")
        db_name = os.environ.get("DB_NAME", "inventory_db")
        return f"postgresql://{user}:{password}@{host}:{port}/{db_name}"

    path = os.environ.get("INVENTORY_DB_PATH", "inventory.db")
    return f"sqlite:///{path}"


def get_redis_host_and_port():
    """Get Redis connection details from environment variables."""
    host = os.environ.get("REDIS_HOST", "localhost")
    port = int(os.environ.get("REDIS_PORT", "6379"))
    return dict(host=host, port=port)


def get_api_url():
    """Get API URL from environment variables."""
    host = os.environ.get("API_HOST", "localhost")
    port = int(os.environ.get("API_PORT", "8000"))
    return f"http://{host}:{port}"


def get_alert_thresholds():
    """Get dashboard risk-alert thresholds from environment variables."""
    return dict(
        low_stock=int(os.environ.get("LOW_STOCK_THRESHOLD", "5")),
        expiry_warning_days=int(os.environ.get("EXPIRY_WARNING_DAYS", "30")),
        stale_inventory_days=int(os.environ.get("STALE_INVENTORY_DAYS", "30")),
    )


def get_reports_api_url():
    """Get reports API URL from environment variables."""
    host = os.environ.get("REPORTS_API_HOST", os.environ.get("API_HOST", "localhost"))
    port = int(os.environ.get("REPORTS_API_PORT", "8001"))
    return f"http://{host}:{port}"
