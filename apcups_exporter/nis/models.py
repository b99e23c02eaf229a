"""
Data models for apcupsd status reports.

This module defines the status enumeration and the Pydantic model for a
typed snapshot of one status report, plus the mapping from the raw
key/value record to that snapshot.
"""

import enum
from datetime import timedelta
from typing import Collection, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import NISParseError
from .parser import parse_duration, parse_measurement

RawRecord = Dict[str, str]


class UPSState(str, enum.Enum):
    """
    UPS operating states reported in the STATUS field.

    Declaration order is significant: a state's position is its numeric code.
    See apcupsd's src/lib/apcstatus.c for the list of statuses.
    """

    ONLINE = "online"
    ONBATT = "onbatt"
    TRIM = "trim"
    BOOST = "boost"
    OVERLOAD = "overload"
    LOWBATT = "lowbatt"
    REPLACEBATT = "replacebatt"
    NOBATT = "nobatt"
    SLAVE = "slave"
    SLAVEDOWN = "slavedown"
    COMMLOST = "commlost"
    SHUTTING_DOWN = "shutting down"

    @property
    def code(self) -> int:
        return STATUS_LIST.index(self)


STATUS_LIST: List[UPSState] = list(UPSState)

DEFAULT_REQUIRED_FIELDS = ("STATUS", "BCHARGE", "TONBATT", "TIMELEFT")

# (raw key, snapshot attribute, parser); processed in this order
FIELD_MAP: List[Tuple[str, str, str]] = [
    ("STATUS", "status", "text"),
    ("NOMPOWER", "nominal_power", "measurement"),
    ("BCHARGE", "battery_charge_percent", "measurement"),
    ("TONBATT", "time_on_battery", "duration"),
    ("TIMELEFT", "time_left", "duration"),
    ("MINTIMEL", "min_time_left", "duration"),
    ("CUMONBATT", "cumulative_time_on_battery", "duration"),
    ("LOADPCT", "load_percent", "measurement"),
    ("MBATTCHG", "min_battery_charge_percent", "measurement"),
    ("BATTV", "battery_voltage", "measurement"),
    ("LINEV", "line_voltage", "measurement"),
    ("NOMBATTV", "nominal_battery_voltage", "measurement"),
    ("NOMINV", "nominal_input_voltage", "measurement"),
    ("HITRANS", "high_transfer_voltage", "measurement"),
    ("LOTRANS", "low_transfer_voltage", "measurement"),
    ("HOSTNAME", "hostname", "text"),
    ("UPSNAME", "ups_name", "text"),
]


def classify_status(status: str) -> Optional[UPSState]:
    """Match a STATUS value against the known states, or None."""
    try:
        return UPSState(status.strip().lower())
    except ValueError:
        return None


class StatusSnapshot(BaseModel):
    """
    Typed state of the UPS at one poll.

    Numeric fields are None when the daemon did not report them.
    """

    model_config = ConfigDict(frozen=True)

    status: str = ""
    state: Optional[UPSState] = None

    nominal_power: Optional[float] = Field(None, description="Nominal power in watts")
    battery_charge_percent: Optional[float] = None
    load_percent: Optional[float] = None
    min_battery_charge_percent: Optional[float] = None

    time_on_battery: Optional[timedelta] = None
    time_left: Optional[timedelta] = None
    min_time_left: Optional[timedelta] = None
    cumulative_time_on_battery: Optional[timedelta] = None

    battery_voltage: Optional[float] = None
    line_voltage: Optional[float] = None
    nominal_battery_voltage: Optional[float] = None
    nominal_input_voltage: Optional[float] = None
    high_transfer_voltage: Optional[float] = None
    low_transfer_voltage: Optional[float] = None

    hostname: str = ""
    ups_name: str = ""

    @property
    def status_code(self) -> Optional[int]:
        """Numeric code of the matched state, None for unknown statuses."""
        return self.state.code if self.state is not None else None


def map_snapshot(
    record: RawRecord,
    *,
    strict: bool = False,
    required: Collection[str] = DEFAULT_REQUIRED_FIELDS,
) -> StatusSnapshot:
    """
    Convert a raw status record into a StatusSnapshot.

    Args:
        record: Mapping of record key to trimmed value.
        strict: Treat empty measurement values as errors instead of 0.0.
        required: Keys that must be present in the record.

    Raises:
        NISParseError: For the first missing required key or unparseable
            value; no partial snapshot is produced.
    """
    values: Dict[str, object] = {}
    for key, attr, kind in FIELD_MAP:
        raw = record.get(key)
        if raw is None:
            if key in required:
                raise NISParseError("required field missing", key)
            continue

        if kind == "measurement":
            values[attr] = parse_measurement(raw, key, allow_empty=not strict)
        elif kind == "duration":
            values[attr] = parse_duration(raw, key)
        elif attr == "status":
            values[attr] = raw.lower()
            values["state"] = classify_status(raw)
        else:
            values[attr] = raw

    return StatusSnapshot(**values)
