"""
Polling Data Models

Pydantic models for registered queries and the per-tick outcome a reader
reports back to the scheduler.
"""

from pydantic import BaseModel, ConfigDict, Field

from promql_trigger.core.config.constants import TickStatus


class RegisteredQuery(BaseModel):
    """
    A PromQL expression registered for polling.

    ``path`` is the webhook target: a bare path as produced by the
    registration endpoint, or a full URL once the reader is built.
    ``context`` is opaque and echoed back to the webhook.
    """

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., min_length=1, description="PromQL expression")
    path: str = Field(..., description="Webhook path or URL")
    context: str = Field(default="", description="Opaque string forwarded to the webhook")


class QueryRegistry(BaseModel):
    """Persisted form of all registered queries: ``{"queries": [...]}``."""

    queries: list[RegisteredQuery] = Field(default_factory=list)


class TickOutcome(BaseModel):
    """
    Result of one reader tick.

    Attributes:
        status: What happened on this tick
        error_kind: Error taxonomy tag for failed ticks (parse, resolution,
            transport, protocol, timeout)
        message: Human readable error message for failed ticks
        status_code: Webhook response status, when a POST was made
    """

    model_config = ConfigDict(frozen=True)

    status: TickStatus
    error_kind: str | None = None
    message: str | None = None
    status_code: int | None = None

    @property
    def failed(self) -> bool:
        return self.status in (TickStatus.QUERY_FAILED, TickStatus.DELIVERY_FAILED)
