"""
Polling Module

Readers poll registered queries and deliver non-empty results to webhooks;
the scheduler drives all readers from one loop.
"""

from .models import QueryRegistry, RegisteredQuery, TickOutcome
from .reader import Reader
from .scheduler import PollScheduler, interval_trigger

__all__ = [
    "PollScheduler",
    "QueryRegistry",
    "Reader",
    "RegisteredQuery",
    "TickOutcome",
    "interval_trigger",
]
