"""
Mapping from a StatusSnapshot to the exporter's gauge schema.
"""

import logging
from datetime import timedelta
from typing import Dict, Optional

from ..nis.models import STATUS_LIST, StatusSnapshot
from .sink import MetricsSink

logger = logging.getLogger(__name__)

# snapshot attribute -> gauge name
FIELD_GAUGES: Dict[str, str] = {
    "nominal_power": "apcups_nominal_power_watts",
    "battery_charge_percent": "apcups_battery_charge_percent",
    "min_battery_charge_percent": "apcups_min_battery_charge_percent",
    "load_percent": "apcups_load_percent",
    "time_on_battery": "apcups_time_on_battery_seconds",
    "time_left": "apcups_time_left_seconds",
    "min_time_left": "apcups_min_time_left_seconds",
    "cumulative_time_on_battery": "apcups_cum_time_on_battery_seconds",
    "battery_voltage": "apcups_battery_volts",
    "line_voltage": "apcups_line_volts",
    "nominal_battery_voltage": "apcups_nom_battery_volts",
    "nominal_input_voltage": "apcups_nom_input_volts",
    "high_transfer_voltage": "apcups_high_transfer_volts",
    "low_transfer_voltage": "apcups_low_transfer_volts",
}


class SnapshotPublisher:
    """
    Writes snapshots to a sink.

    Keeps track of the extra status label published for an unknown status
    so it can be withdrawn once the status changes. Fields missing from a
    report are withdrawn rather than left at their last value.
    """

    def __init__(self, sink: MetricsSink, *, publish_unknown_status: bool = False):
        self.sink = sink
        self.publish_unknown_status = publish_unknown_status
        self._extra_status: Optional[Dict[str, str]] = None
        self._unknown_status: Optional[str] = None

    def publish(self, snapshot: StatusSnapshot, collect_seconds: float) -> None:
        labels = {"hostname": snapshot.hostname, "upsname": snapshot.ups_name}

        self.sink.set_gauge("apcups_collect_time_seconds", labels, collect_seconds)
        self._publish_status(snapshot, labels)

        for attr, gauge in FIELD_GAUGES.items():
            value = getattr(snapshot, attr)
            if value is None:
                self.sink.remove_gauge(gauge, labels)
                continue
            if isinstance(value, timedelta):
                value = value.total_seconds()
            self.sink.set_gauge(gauge, labels, value)

    def _publish_status(self, snapshot: StatusSnapshot, labels: Dict[str, str]) -> None:
        for state in STATUS_LIST:
            matched = state == snapshot.state
            self.sink.set_gauge("apcups_status", {**labels, "status": state.value}, 1.0 if matched else 0.0)

        if snapshot.status_code is not None:
            self.sink.set_gauge("apcups_status_numeric", labels, float(snapshot.status_code))
        else:
            if snapshot.status != self._unknown_status:
                logger.warning("Unknown UPS status '%s' for %s", snapshot.status, snapshot.ups_name or "UPS")
            self.sink.remove_gauge("apcups_status_numeric", labels)
        self._unknown_status = snapshot.status if snapshot.state is None else None

        extra = None
        if snapshot.state is None and self.publish_unknown_status and snapshot.status:
            extra = {**labels, "status": snapshot.status}
        if self._extra_status is not None and self._extra_status != extra:
            self.sink.remove_gauge("apcups_status", self._extra_status)
        if extra is not None:
            self.sink.set_gauge("apcups_status", extra, 1.0)
        self._extra_status = extra


def publish_snapshot(
    sink: MetricsSink,
    snapshot: StatusSnapshot,
    collect_seconds: float,
    *,
    publish_unknown_status: bool = False,
) -> None:
    """Publish a single snapshot without tracking state across calls."""
    SnapshotPublisher(sink, publish_unknown_status=publish_unknown_status).publish(snapshot, collect_seconds)
