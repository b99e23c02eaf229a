"""
Background polling service for apcupsd.

This module contains the StatusPoller class, which periodically queries
the NIS server, maps the response to a snapshot and publishes it to a
metrics sink. Each tick is isolated: a failure is logged and the next
tick runs on schedule.
"""

import asyncio
import logging
import time
from typing import Optional

from ..config import Settings, settings as default_settings
from ..metrics.publisher import SnapshotPublisher
from ..metrics.sink import MetricsSink
from .client import NISClient
from .errors import NISParseError, NISTransportError
from .models import StatusSnapshot, map_snapshot

logger = logging.getLogger(__name__)


class StatusPoller:
    """
    A service that polls an apcupsd NIS server for status reports.
    """

    def __init__(
        self,
        client: NISClient,
        sink: MetricsSink,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the poller.

        Args:
            client: Client for the daemon to poll.
            sink: Sink that receives the gauges of every successful poll.
            settings: Interval and parsing options; defaults to the global settings.
        """
        self.client = client
        self.settings = settings or default_settings
        self.publisher = SnapshotPublisher(
            sink, publish_unknown_status=self.settings.PUBLISH_UNKNOWN_STATUS
        )
        self._task: asyncio.Task | None = None
        self._should_stop = asyncio.Event()
        self.last_snapshot: StatusSnapshot | None = None
        self.last_success: float | None = None
        self.last_error: str | None = None
        self.consecutive_failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the poller as a background task."""
        if self.running:
            logger.warning("Poller is already running.")
            return

        logger.info("Starting status poller for %s every %ss", self.client.address, self.settings.POLL_INTERVAL)
        self._should_stop.clear()
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self):
        """Stop the poller, interrupting an in-flight poll."""
        if not self.running:
            logger.warning("Poller is not running.")
            return

        logger.info("Stopping status poller for %s", self.client.address)
        self._should_stop.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        logger.info("Status poller stopped.")

    async def poll_once(self) -> StatusSnapshot:
        """
        Run one poll cycle: fetch, map and publish.

        Raises:
            NISTransportError: If the daemon could not be queried.
            NISParseError: If the response could not be mapped.
        """
        start = time.monotonic()
        record = await self.client.fetch_status()
        snapshot = map_snapshot(
            record,
            strict=self.settings.STRICT_MEASUREMENTS,
            required=self.settings.REQUIRED_FIELDS,
        )
        collect_seconds = time.monotonic() - start

        self.publisher.publish(snapshot, collect_seconds)
        logger.debug("Published snapshot %r", snapshot)
        return snapshot

    async def _poll_loop(self):
        """The main polling loop."""
        while not self._should_stop.is_set():
            try:
                snapshot = await self.poll_once()
            except NISTransportError as e:
                self._record_failure("fetch", e)
            except NISParseError as e:
                self._record_failure("parse", e)
            except Exception as e:
                logger.exception("An unexpected error occurred in the polling loop.")
                self.last_error = str(e)
                self.consecutive_failures += 1
            else:
                if self.consecutive_failures:
                    logger.info(
                        "Polling %s recovered after %d failed attempts.",
                        self.client.address,
                        self.consecutive_failures,
                    )
                self.consecutive_failures = 0
                self.last_error = None
                self.last_snapshot = snapshot
                self.last_success = time.time()

            try:
                await asyncio.sleep(self.settings.POLL_INTERVAL)
            except asyncio.CancelledError:
                break

    def _record_failure(self, phase: str, error: Exception):
        self.consecutive_failures += 1
        self.last_error = f"{phase}: {error}"
        if self.consecutive_failures == 1:
            logger.error("Error collecting UPS data (%s) from %s: %s", phase, self.client.address, error)
        else:
            logger.debug(
                "Error collecting UPS data (%s) from %s, attempt %d: %s",
                phase,
                self.client.address,
                self.consecutive_failures,
                error,
            )
