"""
Client Protocols

Structural interfaces for the collaborators the PromQL pipeline depends on,
so the sanitizer, readers and registration service can be wired with real
HTTP clients in production and with plain test doubles in tests.

Author: System Architect
Date: 2026-03-02
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from promql_trigger.polling.models import RegisteredQuery
    from promql_trigger.promql.result import QueryResult


@runtime_checkable
class GuidResolver(Protocol):
    """
    Resolves an application name to the GUID the metrics backend indexes by.

    Implementations:
    - CapiClient: platform API lookup scoped to the current space
    """

    async def get_app_guid(self, app_name: str) -> str:
        """
        Raises:
            ResolutionError: If the name is unknown or the lookup fails
        """
        ...


@runtime_checkable
class QueryClient(Protocol):
    """Executes an instant PromQL query and returns the decoded result."""

    async def query(self, query_text: str) -> QueryResult:
        ...


@runtime_checkable
class PresenceClient(Protocol):
    """Reports whether an instant PromQL query currently returns any data."""

    async def has_data(self, query_text: str) -> bool:
        ...


@runtime_checkable
class StateStore(Protocol):
    """Persists the full list of registered queries."""

    async def save_state(self, queries: list[RegisteredQuery]) -> None:
        ...
