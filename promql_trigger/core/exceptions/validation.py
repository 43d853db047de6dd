"""
Validation Exceptions

All exceptions related to registration request validation

Author: System Architect
Date: 2026-03-02
"""

from promql_trigger.core.exceptions.base import TriggerError


class RegistrationError(TriggerError):
    """
    Raised when a registration request is rejected.

    The message is returned verbatim as the ``error`` field of the 400
    response, e.g. ``promql type`` when a function declares no PromQL
    events or ``invalid/missing Query`` when an event has no query.
    """

    kind = "validation"
