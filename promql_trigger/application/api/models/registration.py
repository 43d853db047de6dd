"""
Registration API Models

Pydantic models for the function registration exchange with the function
gateway.

Request: the gateway sends every function declared for this event source,
with its opaque ``handler`` and its events grouped by event type::

    {"functions": [{"handler": {...},
                    "events": {"promql": [{"query": "...", "context": "..."}]}}]}

Response: one HTTP function per ``promql`` event, each bound to a freshly
generated webhook path::

    {"functions": [{"handler": {...},
                    "events": [{"method": "POST", "path": "/123-prom-ql"}]}]}
"""

from typing import Any

from pydantic import BaseModel, Field


class FunctionDeclaration(BaseModel):
    """One declared function and its events, keyed by event type."""

    handler: dict[str, Any] = Field(default_factory=dict, description="Opaque handler definition")
    events: dict[str, list[dict[str, Any]]] = Field(
        default_factory=dict, description="Event declarations by type"
    )


class ConvertRequest(BaseModel):
    """Registration request body."""

    functions: list[FunctionDeclaration] = Field(default_factory=list)


class HTTPEvent(BaseModel):
    """An HTTP route the gateway should expose for a function."""

    method: str = "POST"
    path: str


class HTTPFunction(BaseModel):
    """A function bound to HTTP routes."""

    handler: dict[str, Any] = Field(default_factory=dict)
    events: list[HTTPEvent] = Field(default_factory=list)


class ConvertResponse(BaseModel):
    """Registration response body."""

    functions: list[HTTPFunction] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Body of a rejected registration."""

    error: str
