"""
Parsing helpers for apcupsd status records.

Each record in a status response is a single ``"KEY : value unit"`` line.
Values carry their unit as trailing words (``"13.5 Volts"``,
``"104.6 Minutes"``, ``"5.0 Percent Load Capacity"``); the helpers here
strip the unit and convert the value to a Python type.
"""

from datetime import timedelta
from typing import Optional, Tuple

from ..utils.timeparse import parse_duration as parse_duration_literal
from .errors import NISParseError

# Unit words apcupsd emits for durations, mapped to duration literal suffixes
DURATION_UNITS = {
    "second": "s",
    "seconds": "s",
    "minute": "m",
    "minutes": "m",
    "hour": "h",
    "hours": "h",
    "day": "d",
    "days": "d",
}


def parse_record_line(line: str) -> Tuple[str, str]:
    """
    Split a raw record into its key and value.

    Only the first ``:`` separates key from value, so values such as
    ``DATE : 2016-08-30 17:12:01 +0200`` are kept whole. Both halves are
    stripped of surrounding whitespace.

    Raises:
        NISParseError: If the line has no ``:`` separator.
    """
    key, sep, value = line.partition(":")
    if not sep:
        raise NISParseError(f"record has no ':' separator: {line.strip()!r}")
    return key.strip(), value.strip()


def parse_measurement(value: str, field: Optional[str] = None, *, allow_empty: bool = True) -> float:
    """
    Parse a numeric value with an optional unit suffix, e.g. ``"13.5 Volts"``.

    An empty value maps to ``0.0`` unless ``allow_empty`` is False.
    """
    if value == "":
        if allow_empty:
            return 0.0
        raise NISParseError("empty measurement", field)

    number = value.split(" ", 1)[0]
    try:
        return float(number)
    except ValueError:
        raise NISParseError(f"invalid number {number!r} in {value!r}", field) from None


def parse_duration(value: str, field: Optional[str] = None) -> timedelta:
    """
    Parse a duration with a unit word, e.g. ``"30 seconds"`` or ``"104.6 Minutes"``.

    The quantity and unit are folded into a compact literal (``"104.6m"``)
    which is then parsed as a duration expression.
    """
    chunks = value.split(" ")
    if len(chunks) < 2 or not chunks[1]:
        raise NISParseError(f"duration {value!r} has no unit", field)

    quantity, unit = chunks[0], chunks[1].lower()
    suffix = DURATION_UNITS.get(unit)
    if suffix is None:
        raise NISParseError(f"unknown duration unit {chunks[1]!r}", field)

    try:
        return parse_duration_literal(quantity + suffix)
    except ValueError:
        raise NISParseError(f"invalid duration {value!r}", field) from None
