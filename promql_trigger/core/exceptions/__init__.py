"""
Exception Module

Structured exception hierarchy for the PromQL trigger service.

Module Structure:
-----------------
- **base.py**: TriggerError base class + ConfigurationError
- **promql.py**: Parsing and identifier resolution exceptions
- **backend.py**: HTTP transport, protocol and persistence exceptions
- **validation.py**: Registration request validation exceptions

Usage:
------
```python
from promql_trigger.core.exceptions import ResolutionError, TransportError
```

Author: System Architect
Date: 2026-03-02
"""

# Base exception
from promql_trigger.core.exceptions.base import ConfigurationError, TriggerError

# Backend exceptions
from promql_trigger.core.exceptions.backend import (
    ProtocolError,
    ResultDecodeError,
    StatePersistenceError,
    TransportError,
)

# PromQL exceptions
from promql_trigger.core.exceptions.promql import PromQLParseError, ResolutionError

# Validation exceptions
from promql_trigger.core.exceptions.validation import RegistrationError

__all__ = [
    # Base
    "TriggerError",
    "ConfigurationError",
    # PromQL
    "PromQLParseError",
    "ResolutionError",
    # Backend
    "TransportError",
    "ProtocolError",
    "ResultDecodeError",
    "StatePersistenceError",
    # Validation
    "RegistrationError",
]
