"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the PromQL trigger service.

Author: System Architect
Date: 2026-03-02
"""

from enum import Enum

# ============================================================================
# PromQL
# ============================================================================

# Label whose values are application names that must be resolved to GUIDs
SOURCE_ID_LABEL = "source_id"

QUERY_ENDPOINT = "/api/v1/query"
QUERY_RANGE_ENDPOINT = "/api/v1/query_range"


class ResultType(str, Enum):
    """Result types a query response can carry."""

    VECTOR = "vector"
    MATRIX = "matrix"


# ============================================================================
# Delivery
# ============================================================================


class DeliveryMode(str, Enum):
    """
    What a reader POSTs when its query has data.

    - RESULT: the decoded query result, re-serialized as JSON with the
      registered context attached
    - CONTEXT: the raw registered context string, after a boolean
      presence check
    """

    RESULT = "result"
    CONTEXT = "context"


class TickStatus(str, Enum):
    """Outcome of a single reader tick."""

    DELIVERED = "delivered"
    NO_DATA = "no_data"
    QUERY_FAILED = "query_failed"
    DELIVERY_FAILED = "delivery_failed"


# Error kind reported for timeouts that are not attributed to a specific stage
TIMEOUT_KIND = "timeout"

# ============================================================================
# Timeouts & Scheduling (seconds)
# ============================================================================

DEFAULT_INTERVAL_SECONDS = 1.0
DEFAULT_SANITIZE_TIMEOUT = 5.0
DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_TICK_TIMEOUT = 5.0
DEFAULT_WEBHOOK_TIMEOUT = 5.0
DEFAULT_CAPI_TIMEOUT = 5.0
DEFAULT_STATE_SAVE_TIMEOUT = 5.0

# ============================================================================
# Registration & Persistence
# ============================================================================

PROMQL_EVENT_TYPE = "promql"
WEBHOOK_PATH_SUFFIX = "-prom-ql"
QUERIES_ENV_VAR = "QUERIES"
