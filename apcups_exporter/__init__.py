"""
apcups-exporter: Prometheus exporter for apcupsd.
"""

__version__ = "0.1.0"
