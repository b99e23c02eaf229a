"""
apcupsd Network Information Server integration.

Provides the status client, record parsing and the typed status snapshot.
"""

from apcups_exporter.nis.client import NISClient
from apcups_exporter.nis.errors import NISError, NISParseError, NISTransportError
from apcups_exporter.nis.models import StatusSnapshot, UPSState, map_snapshot

__all__ = [
    "NISClient",
    "NISError",
    "NISParseError",
    "NISTransportError",
    "StatusSnapshot",
    "UPSState",
    "map_snapshot",
]
