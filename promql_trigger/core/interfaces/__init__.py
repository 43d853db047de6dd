"""
Core Interfaces Module

Protocols for the collaborators of the PromQL pipeline, enabling dependency
injection and easy mocking in tests.

Components:
-----------
- **clients.py**: GuidResolver, QueryClient, PresenceClient, StateStore

Author: System Architect
Date: 2026-03-02
"""

from promql_trigger.core.interfaces.clients import (
    GuidResolver,
    PresenceClient,
    QueryClient,
    StateStore,
)

__all__ = [
    "GuidResolver",
    "PresenceClient",
    "QueryClient",
    "StateStore",
]
