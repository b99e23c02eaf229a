"""
Metric sinks for UPS snapshots.

A sink accepts named, labelled gauge observations. ``PrometheusSink``
records them on an injected ``CollectorRegistry`` so that nothing is
registered process-wide.
"""

import logging
from typing import Dict, Mapping, Protocol, Tuple

from prometheus_client import CollectorRegistry, Gauge

logger = logging.getLogger(__name__)

LABELS: Tuple[str, ...] = ("hostname", "upsname")
STATUS_LABELS: Tuple[str, ...] = LABELS + ("status",)

# name -> (help, label names)
GAUGES: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "apcups_status": ("Current status of UPS", STATUS_LABELS),
    "apcups_status_numeric": ("Current status of UPS represented as integer", LABELS),
    "apcups_nominal_power_watts": ("Nominal UPS Power", LABELS),
    "apcups_battery_charge_percent": ("Percentage Battery Charge", LABELS),
    "apcups_min_battery_charge_percent": ("Minimum battery charge before shutdown", LABELS),
    "apcups_load_percent": ("Percentage Battery Load", LABELS),
    "apcups_time_on_battery_seconds": ("Total time on UPS battery", LABELS),
    "apcups_time_left_seconds": ("Time on UPS battery", LABELS),
    "apcups_min_time_left_seconds": ("Minimum time left before shutdown", LABELS),
    "apcups_cum_time_on_battery_seconds": ("Cumulative time on UPS battery", LABELS),
    "apcups_battery_volts": ("UPS Battery Voltage", LABELS),
    "apcups_line_volts": ("UPS Line Voltage", LABELS),
    "apcups_nom_battery_volts": ("UPS Nominal Battery Voltage", LABELS),
    "apcups_nom_input_volts": ("UPS Nominal Input Voltage", LABELS),
    "apcups_high_transfer_volts": ("Line voltage above which the UPS transfers to battery", LABELS),
    "apcups_low_transfer_volts": ("Line voltage below which the UPS transfers to battery", LABELS),
    "apcups_collect_time_seconds": (
        "Time to collect stats for last poll of UPS network interface",
        LABELS,
    ),
}


class MetricsSink(Protocol):
    """
    Protocol for a gauge sink.

    Values are last-write-wins per (name, labels).
    """

    def set_gauge(self, name: str, labels: Mapping[str, str], value: float) -> None:
        ...

    def remove_gauge(self, name: str, labels: Mapping[str, str]) -> None:
        ...


class PrometheusSink:
    """
    A sink backed by prometheus_client gauges.

    Args:
        registry: Registry to declare the gauges on; a fresh one is created
            when omitted.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._gauges: Dict[str, Gauge] = {
            name: Gauge(name, help_text, list(labelnames), registry=self.registry)
            for name, (help_text, labelnames) in GAUGES.items()
        }

    def _gauge(self, name: str) -> Gauge:
        try:
            return self._gauges[name]
        except KeyError:
            raise ValueError(f"Unknown gauge '{name}'") from None

    def set_gauge(self, name: str, labels: Mapping[str, str], value: float) -> None:
        self._gauge(name).labels(**labels).set(value)

    def remove_gauge(self, name: str, labels: Mapping[str, str]) -> None:
        gauge = self._gauge(name)
        labelvalues = [labels[label] for label in GAUGES[name][1]]
        try:
            gauge.remove(*labelvalues)
        except KeyError:
            # Label set was never published
            pass
