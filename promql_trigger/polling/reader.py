"""
Reader (Poll Loop Body)

A Reader owns one registered query for its whole lifetime. Each ``tick()``
runs one full, strictly sequential cycle:

    query backend → decide (empty / non-empty) → POST webhook → outcome

Delivery is best effort and at-least-zero: failures are logged and reported
in the returned ``TickOutcome`` but never raised, never retried and never
remembered. A query that keeps returning data fires on every tick.

Two delivery modes exist:

- ``RESULT``: the typed query result is POSTed as JSON, with ``context``
  set to the registered context
- ``CONTEXT``: a boolean presence check is made and the raw registered
  context string is POSTed
"""

from __future__ import annotations

import asyncio

import httpx

from promql_trigger.core.config.constants import (
    DEFAULT_TICK_TIMEOUT,
    DEFAULT_WEBHOOK_TIMEOUT,
    TIMEOUT_KIND,
    DeliveryMode,
    TickStatus,
)
from promql_trigger.core.exceptions import ProtocolError, TransportError, TriggerError
from promql_trigger.core.interfaces import PresenceClient, QueryClient
from promql_trigger.core.logging import clear_reader_path, get_logger, set_reader_path
from promql_trigger.polling.models import RegisteredQuery, TickOutcome

logger = get_logger(__name__)


class Reader:
    """
    Polls one registered query and delivers non-empty results.

    Attributes:
        query: The registered query (immutable)
        mode: What the webhook receives
        tick_timeout: Bound on the query step of a tick, in seconds
        webhook_timeout: Bound on the webhook POST, in seconds
    """

    def __init__(
        self,
        query: RegisteredQuery,
        client: QueryClient | PresenceClient,
        http_client: httpx.AsyncClient,
        mode: DeliveryMode = DeliveryMode.RESULT,
        tick_timeout: float = DEFAULT_TICK_TIMEOUT,
        webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
    ):
        if mode is DeliveryMode.RESULT and not isinstance(client, QueryClient):
            raise TypeError("RESULT delivery needs a client with query()")
        if mode is DeliveryMode.CONTEXT and not isinstance(client, PresenceClient):
            raise TypeError("CONTEXT delivery needs a client with has_data()")

        self.query = query
        self.mode = mode
        self.tick_timeout = tick_timeout
        self.webhook_timeout = webhook_timeout
        self._client = client
        self._http = http_client

    @property
    def path(self) -> str:
        return self.query.path

    async def tick(self) -> TickOutcome:
        """
        Run one poll cycle.

        Never raises for query or delivery failures; the outcome says what
        happened.
        """
        set_reader_path(self.query.path)
        try:
            return await self._tick()
        finally:
            clear_reader_path()

    async def _tick(self) -> TickOutcome:
        try:
            payload = await asyncio.wait_for(self._fetch_payload(), timeout=self.tick_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "failed to make PromQL query",
                error=f"timed out after {self.tick_timeout}s",
                error_kind=TIMEOUT_KIND,
            )
            return TickOutcome(
                status=TickStatus.QUERY_FAILED,
                error_kind=TIMEOUT_KIND,
                message=f"query timed out after {self.tick_timeout}s",
            )
        except TriggerError as e:
            logger.warning(
                "failed to make PromQL query",
                error=e.message,
                error_kind=e.kind,
                error_type=type(e).__name__,
            )
            return TickOutcome(status=TickStatus.QUERY_FAILED, error_kind=e.kind, message=e.message)

        if payload is None:
            return TickOutcome(status=TickStatus.NO_DATA)

        content, content_type = payload
        return await self._deliver(content, content_type)

    async def _fetch_payload(self) -> tuple[bytes, str] | None:
        """Query the backend; ``None`` means there is nothing to deliver."""
        if self.mode is DeliveryMode.CONTEXT:
            if not await self._client.has_data(self.query.query):
                return None
            return self.query.context.encode(), "text/plain; charset=utf-8"

        result = await self._client.query(self.query.query)
        if result.is_empty:
            return None
        return result.with_context(self.query.context).to_json(), "application/json"

    async def _deliver(self, content: bytes, content_type: str) -> TickOutcome:
        try:
            response = await asyncio.wait_for(
                self._http.post(
                    self.query.path,
                    content=content,
                    headers={"Content-Type": content_type},
                ),
                timeout=self.webhook_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("failed to make POST", error=f"timed out after {self.webhook_timeout}s")
            return TickOutcome(
                status=TickStatus.DELIVERY_FAILED,
                error_kind=TIMEOUT_KIND,
                message=f"POST timed out after {self.webhook_timeout}s",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("failed to make POST", error=str(e), error_type=type(e).__name__)
            return TickOutcome(
                status=TickStatus.DELIVERY_FAILED,
                error_kind=TransportError.kind,
                message=str(e) or type(e).__name__,
            )

        if response.status_code != httpx.codes.OK:
            logger.warning(
                "POST returned unexpected status code",
                status_code=response.status_code,
                body=response.text[:500],
            )
            return TickOutcome(
                status=TickStatus.DELIVERY_FAILED,
                error_kind=ProtocolError.kind,
                message=f"POST returned unexpected status code {response.status_code}",
                status_code=response.status_code,
            )

        logger.info("successfully made POST", status_code=response.status_code)
        return TickOutcome(status=TickStatus.DELIVERED, status_code=response.status_code)
