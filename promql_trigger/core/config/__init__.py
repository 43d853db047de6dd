"""
Core configuration: system constants and duration helpers.
"""

from .constants import DeliveryMode, ResultType, TickStatus
from .durations import format_duration, parse_duration

__all__ = [
    "DeliveryMode",
    "ResultType",
    "TickStatus",
    "format_duration",
    "parse_duration",
]
