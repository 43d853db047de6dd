"""
Core Module

Foundational components: configuration constants, exceptions, interfaces
and logging.
"""

from .exceptions import (
    ConfigurationError,
    PromQLParseError,
    ProtocolError,
    ResolutionError,
    TransportError,
    TriggerError,
)
from .logging import get_logger, setup_logging
