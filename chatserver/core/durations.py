"""Parsing of human-readable duration strings such as "1h" or "7d"."""

import re
from datetime import timedelta

_DURATION_RE = re.compile(
    r"^\s*(?P<value>-?(?:\d+)?\.?\d+)\s*(?P<unit>[a-z]*)\s*$",
    re.IGNORECASE,
)

# Unit aliases mapped to their length in seconds
_UNIT_SECONDS = {
    "ms": 0.001,
    "msec": 0.001,
    "msecs": 0.001,
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "": 1,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
    "y": 31557600,
    "yr": 31557600,
    "yrs": 31557600,
    "year": 31557600,
    "years": 31557600,
}

# Upper bound on any duration, keeping token expiry instants representable
MAX_DURATION = timedelta(days=36525)


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Convert a duration into a timedelta.

    Accepts a timedelta, a number of seconds, or a string made of a number
    and an optional unit ("90", "30m", "1h", "7d", "2 days"). A number
    without a unit is read as seconds.

    Raises:
        ValueError: If the value cannot be parsed, or its magnitude exceeds
            MAX_DURATION.
    """
    if isinstance(value, timedelta):
        return _bounded(value, value)
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return _to_timedelta(value, value)

    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")

    unit = match.group("unit").lower()
    if unit not in _UNIT_SECONDS:
        raise ValueError(f"Unknown duration unit {unit!r} in {value!r}")

    return _to_timedelta(float(match.group("value")) * _UNIT_SECONDS[unit], value)


def _to_timedelta(seconds: float, value) -> timedelta:
    try:
        duration = timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        raise ValueError(f"Duration out of range: {value!r}") from None
    return _bounded(duration, value)


def _bounded(duration: timedelta, value) -> timedelta:
    if abs(duration) > MAX_DURATION:
        raise ValueError(f"Duration out of range: {value!r}")
    return duration
