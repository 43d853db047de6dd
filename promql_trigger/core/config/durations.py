"""
Duration Helpers

Conversion between seconds and the duration strings used by the platform
(``INTERVAL=1s``) and by the metrics backend (``step=1m30s``).
"""

import math
import re
from datetime import timedelta

_UNIT_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# Largest unit first; sub-millisecond precision is not representable in a step
_FORMAT_UNITS = (
    ("h", 3600 * 1000),
    ("m", 60 * 1000),
    ("s", 1000),
    ("ms", 1),
)


def parse_duration(value: str | int | float | timedelta) -> float:
    """
    Parse a duration into seconds.

    Accepts a ``timedelta``, a number of seconds, a numeric string, or a
    duration string made of ``<number><unit>`` components such as
    ``1s``, ``1m30s``, ``250ms`` or ``1.5h``.

    Raises:
        ValueError: If the value is not a valid, non-negative duration
    """
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    elif isinstance(value, str):
        seconds = _parse_duration_string(value.strip())
    else:
        raise ValueError(f"invalid duration: {value!r}")

    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"duration must be a finite, non-negative value: {value!r}")
    return seconds


def _parse_duration_string(text: str) -> float:
    if not text:
        raise ValueError("invalid duration: empty string")
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total_ns = 0.0
    for match in _COMPONENT_RE.finditer(text):
        if match.start() != position:
            break
        total_ns += float(match.group(1)) * _UNIT_NANOSECONDS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"invalid duration: {text!r}")
    return total_ns / 1_000_000_000


def format_duration(value: int | float | timedelta) -> str:
    """
    Format a duration as a compact unit string.

    Components are emitted largest first and zero components are
    dropped, e.g. ``5`` -> ``"5s"``, ``90`` -> ``"1m30s"``,
    ``0.25`` -> ``"250ms"``. The result is accepted by the metrics
    backend's ``step`` parameter. Precision is one millisecond.
    """
    seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")

    remaining = round(seconds * 1000)
    if remaining == 0:
        return "0s"

    parts = []
    for unit, size in _FORMAT_UNITS:
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)
