"""
FastAPI application for apcups-exporter.

Serves the Prometheus scrape endpoint and a small health endpoint, and
runs the status poller for the lifetime of the application.
"""
from contextlib import asynccontextmanager
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from apcups_exporter import __version__
from apcups_exporter.config import Settings, settings as default_settings
from apcups_exporter.metrics.sink import PrometheusSink
from apcups_exporter.nis.client import NISClient
from apcups_exporter.nis.poller import StatusPoller
from apcups_exporter.utils.logging import setup_logging

logger = logging.getLogger("apcups_exporter.app")


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""
    status: str
    ups_address: str
    poll_interval_seconds: int
    poller_running: bool
    last_success: Optional[float] = None
    last_error: Optional[str] = None
    consecutive_failures: int
    ups_status: Optional[str] = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the exporter application.

    The sink, registry and poller are created here and exposed on
    ``app.state``; the poller is started and stopped by the lifespan.
    """
    settings = settings or default_settings
    sink = PrometheusSink()
    client = NISClient(host=settings.UPS_HOST, port=settings.UPS_PORT, timeout=settings.TIMEOUT)
    poller = StatusPoller(client, sink, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        logger.info("Connection to UPS at: %s", settings.ups_address)
        logger.info("Metric listener at: %s:%s", settings.LISTEN_HOST, settings.LISTEN_PORT)
        await poller.start()
        yield
        logger.info("Shutting down apcups-exporter...")
        await poller.stop()

    app = FastAPI(
        title="apcups-exporter",
        description="Prometheus exporter for apcupsd",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sink = sink
    app.state.poller = poller

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.debug("%s %s -> %s in %dms", request.method, request.url.path, response.status_code, duration_ms)
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Report whether the last poll succeeded."""
        snapshot = poller.last_snapshot
        if poller.last_success is None:
            status = "starting" if poller.consecutive_failures == 0 else "critical"
        elif poller.consecutive_failures:
            status = "degraded"
        else:
            status = "healthy"
        return HealthResponse(
            status=status,
            ups_address=settings.ups_address,
            poll_interval_seconds=settings.POLL_INTERVAL,
            poller_running=poller.running,
            last_success=poller.last_success,
            last_error=poller.last_error,
            consecutive_failures=poller.consecutive_failures,
            ups_status=snapshot.status if snapshot else None,
        )

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(sink.registry), media_type=CONTENT_TYPE_LATEST)

    return app
