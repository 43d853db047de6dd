"""
Backend Exceptions

Errors raised when talking HTTP to a remote service: the metrics backend,
the platform API or a webhook target.

Exception Hierarchy:
    TriggerError
    ├── TransportError           (network, DNS, TLS, timeouts)
    ├── ProtocolError            (unexpected status code, bad payload)
    │   └── ResultDecodeError    (query result JSON has the wrong shape)
    └── StatePersistenceError    (saving registered queries failed)

Author: System Architect
Date: 2026-03-02
"""

from promql_trigger.core.exceptions.base import TriggerError


class TransportError(TriggerError):
    """
    Raised when a request never produced an HTTP response.

    Connection refused, DNS failures, TLS errors and request timeouts all
    land here.
    """

    kind = "transport"


class ProtocolError(TriggerError):
    """
    Raised when a response arrived but cannot be used.

    Typical causes are a non-200 status or a body that is not the
    expected JSON document. ``status_code`` and ``body`` are kept in
    ``details`` when available.
    """

    kind = "protocol"

    @property
    def status_code(self) -> int | None:
        return self.details.get("status_code")


class ResultDecodeError(ProtocolError):
    """
    Raised when a query result body does not match the result schema.

    Examples:
        - unknown ``resultType`` with entries present
        - a sample whose value is not a two-element pair of numbers
        - non-string label values
    """


class StatePersistenceError(TriggerError):
    """Raised when registered queries could not be stored or the app not restarted."""

    kind = "persistence"
