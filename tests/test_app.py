"""
Tests for the exporter's HTTP application.
"""

import httpx
import pytest
import pytest_asyncio
from prometheus_client.parser import text_string_to_metric_families

from apcups_exporter.app import create_app
from apcups_exporter.config import Settings


@pytest.fixture
def app_settings(nis_server):
    host, port = nis_server.address
    return Settings(UPS_HOST=host, UPS_PORT=port, POLL_INTERVAL=1, TIMEOUT=2.0)


@pytest.fixture
def app(app_settings):
    return create_app(app_settings)


@pytest_asyncio.fixture
async def async_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health_before_first_poll(async_client, app_settings):
    response = await async_client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "starting"
    assert body["ups_address"] == app_settings.ups_address
    assert body["poll_interval_seconds"] == 1
    assert body["poller_running"] is False
    assert body["ups_status"] is None


@pytest.mark.asyncio
async def test_metrics_after_poll(app, async_client):
    await app.state.poller.poll_once()

    response = await async_client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    families = {family.name: family for family in text_string_to_metric_families(response.text)}

    labels = {"hostname": "beaker.murf.org", "upsname": "backups-950"}
    charge = families["apcups_battery_charge_percent"].samples
    assert [(s.labels, s.value) for s in charge] == [(labels, 100.0)]
    status = {s.labels["status"]: s.value for s in families["apcups_status"].samples}
    assert status["online"] == 1.0
    assert status["onbatt"] == 0.0
    assert "apcups_collect_time_seconds" in families

    registry = app.state.sink.registry
    assert registry.get_sample_value("apcups_status", {**labels, "status": "online"}) == 1.0


@pytest.mark.asyncio
async def test_metrics_path_is_not_redirected(async_client):
    response = await async_client.get("/metrics", follow_redirects=False)
    assert response.status_code == 200
    assert "# HELP apcups_line_volts UPS Line Voltage" in response.text


@pytest.mark.asyncio
async def test_health_reports_last_error(app, async_client, nis_server):
    poller = app.state.poller
    poller._record_failure("fetch", Exception("Unable to connect"))

    body = (await async_client.get("/health")).json()
    assert body["status"] == "critical"
    assert body["last_error"] == "fetch: Unable to connect"
    assert body["consecutive_failures"] == 1


@pytest.mark.asyncio
async def test_lifespan_starts_and_stops_poller(app, nis_server):
    poller = app.state.poller
    async with app.router.lifespan_context(app):
        assert poller.running is True
    assert poller.running is False
