"""
Metrics module for apcups-exporter.

Publishes UPS status snapshots as labelled Prometheus gauges.
"""

from apcups_exporter.metrics.publisher import SnapshotPublisher, publish_snapshot
from apcups_exporter.metrics.sink import GAUGES, MetricsSink, PrometheusSink

__all__ = ["GAUGES", "MetricsSink", "PrometheusSink", "SnapshotPublisher", "publish_snapshot"]
