"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .http_factory import RecordingBackend
from .query_factory import DictResolver, RegisteredQueryFactory
from .result_factory import NANO_TIMESTAMP, QueryResultFactory

__all__ = [
    "NANO_TIMESTAMP",
    "DictResolver",
    "QueryResultFactory",
    "RecordingBackend",
    "RegisteredQueryFactory",
]
