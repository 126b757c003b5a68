# fleettop/durations.py
"""Relative time spans written as ``1h``, ``30m``, ``1h30m``, ``1.5h`` or ``300ms``."""
from __future__ import annotations

import re
from datetime import timedelta

from .errors import InvalidArgument

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# largest span the original tools accept: 2**63-1 nanoseconds, about 2562047h
MAX_SECONDS = (2**63 - 1) / 1e9

# longest units first so "ms" is not read as "m" followed by garbage
_GROUP = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|h|m|s)")


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of ``<number><unit>`` groups into a timedelta.

    Raises InvalidArgument for empty input, missing or unknown units, and
    spans longer than MAX_SECONDS.
    """
    if text is None:
        raise InvalidArgument("Invalid duration format: empty duration")
    s = text
    orig = s
    sign = 1.0
    if s[:1] in ("+", "-"):
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise InvalidArgument(f"Invalid duration format: {orig!r}")

    seconds = 0.0
    pos = 0
    while pos < len(s):
        m = _GROUP.match(s, pos)
        if not m:
            raise InvalidArgument(f"Invalid duration format: {orig!r}")
        seconds += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()
    if seconds > MAX_SECONDS:
        raise InvalidArgument(f"Invalid duration format: {orig!r} is out of range")
    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError:
        raise InvalidArgument(f"Invalid duration format: {orig!r} is out of range") from None


def format_duration(td: timedelta) -> str:
    """Render a timedelta in the same grammar, e.g. ``1h30m`` or ``45s``."""
    total = td.total_seconds()
    if total == 0:
        return "0s"
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    out = ""
    if hours:
        out += f"{int(hours)}h"
    if minutes:
        out += f"{int(minutes)}m"
    if seconds:
        out += f"{seconds:g}s"
    return sign + out
