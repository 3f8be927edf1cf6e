import json
import logging
import pytest
from sqlalchemy.exc import OperationalError
from headphoneweb.common.logging_setup import JSONFormatter, sanitize_message_text
from headphoneweb.db.utils import build_database_url
from headphoneweb.config.settings import Settings


def _record(msg, **extra):
    record = logging.LogRecord("headphoneweb.test", logging.INFO, __file__, 10, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_sanitize_redacts_secrets():
    assert sanitize_message_text("password=hunter2 ok") == "password=[REDACTED] ok"
    assert "sk_live" not in sanitize_message_text('{"client_secret": "sk_live_123"}')


def test_json_formatter_carries_extra_and_truncates_session():
    line = JSONFormatter(env="prod", service="headphoneweb").format(
        _record("cart.add.success", session_id="abcdefghijklmnop", product_id=3))
    data = json.loads(line)
    assert data["message"] == "cart.add.success"
    assert data["product_id"] == 3
    assert data["session_id"] == "abcdefgh..."
    assert data["service"] == "headphoneweb"


def test_database_url_from_parts_and_normalized_url():
    parts = Settings(DATABASE_URL=None, DB_USER="u", DB_PASSWORD="p", DB_HOST="db", DB_PORT=5433, DB_NAME="shop")
    assert build_database_url(parts) == "postgresql+asyncpg://u:p@db:5433/shop"

    hosted = Settings(DATABASE_URL="postgres://u:p@host/shop")
    assert build_database_url(hosted) == "postgresql+asyncpg://u:p@host/shop"


@pytest.mark.asyncio
async def test_health_reports_database_failure(app, anon_client, monkeypatch):
    async def broken_ping():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(app.state.db, "ping", broken_ping)
    resp = await anon_client.get("/api/health")
    assert resp.status_code == 500
    assert resp.json()["error"] == "Database connection error"


@pytest.mark.asyncio
async def test_unexpected_errors_become_generic_500(app, client, monkeypatch):
    async def boom(*args, **kwargs):
        raise RuntimeError("driver exploded")

    monkeypatch.setattr("headphoneweb.products.routes.fetch_in_stock_products", boom)
    resp = await client.get("/api/products", headers={"X-Request-ID": "rid-500"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal Server Error"
    assert "driver exploded" not in resp.text
