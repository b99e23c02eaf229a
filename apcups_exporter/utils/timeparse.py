import re
from datetime import timedelta
from decimal import Decimal

_TERM = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|s|m|h|d)")

_UNIT_SECONDS = {
    "ms": Decimal("0.001"),
    "s": Decimal(1),
    "m": Decimal(60),
    "h": Decimal(3600),
    "d": Decimal(86400),
}


def parse_duration(time_str: str) -> timedelta:
    """
    Parse a compact duration literal like '15s', '104.6m' or '1h30m'.

    Quantities are summed as decimals, so '104.6m' is exactly 6276 seconds.
    """
    if not isinstance(time_str, str) or not time_str:
        raise ValueError("Invalid time string format")

    total = Decimal(0)
    pos = 0
    while pos < len(time_str):
        match = _TERM.match(time_str, pos)
        if not match:
            raise ValueError(f"Invalid time string format: {time_str!r}")
        value, unit = match.groups()
        total += Decimal(value) * _UNIT_SECONDS[unit]
        pos = match.end()

    try:
        return timedelta(seconds=float(total))
    except OverflowError:
        raise ValueError(f"Duration out of range: {time_str!r}") from None


def parse_time(time_str: str) -> int:
    """
    Parse a time string like '15s', '10m', '1h' into whole seconds.
    """
    return int(parse_duration(time_str).total_seconds())
