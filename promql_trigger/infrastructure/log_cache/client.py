"""
Log-Cache PromQL Client
=======================

Asynchronous HTTP client for the log-cache PromQL API, a Prometheus
compatible query endpoint that indexes data by application GUID.

ARCHITECTURAL CONTEXT
---------------------
```
Reader.tick() → [LogCacheClient] → Sanitizer → CAPI (name → GUID)
                       ↓
               GET /api/v1/query(_range) → log-cache
                       ↓
                 QueryResult (typed)
```

KEY DESIGN DECISIONS
--------------------

1. **Two independent time bounds**
   - Sanitizing (which calls the platform API) is bounded by
     ``sanitize_timeout``
   - The backend request is bounded separately by ``request_timeout``
   - A slow name lookup never shortens the time left for the query

2. **No retries**
   - The reader polls again on the next tick, so a failed query is
     simply reported. Retrying here would let one tick overrun the next.

3. **Explicit exception types**
   - ResolutionError / PromQLParseError: sanitizing failed
   - TransportError: network failure or timeout
   - ProtocolError: non-200 status or undecodable body

4. **Shared connection pool**
   - The ``httpx.AsyncClient`` is owned by the application lifespan and
     shared with the readers; this client never closes it.

USAGE
-----
```python
async with httpx.AsyncClient() as http_client:
    client = LogCacheClient("http://log-cache.example.com", sanitizer, http_client)
    result = await client.query('rate(requests{source_id="my-app"}[1m])')
```
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import httpx

from promql_trigger.core.config.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SANITIZE_TIMEOUT,
    QUERY_ENDPOINT,
    QUERY_RANGE_ENDPOINT,
)
from promql_trigger.core.config.durations import format_duration
from promql_trigger.core.exceptions import (
    ProtocolError,
    ResolutionError,
    ResultDecodeError,
    TransportError,
)
from promql_trigger.core.logging import get_logger
from promql_trigger.promql.result import QueryResult, decode_query_result
from promql_trigger.promql.sanitizer import Sanitizer

logger = get_logger(__name__)


def _unix_seconds(value: datetime | int | float) -> str:
    if isinstance(value, datetime):
        return str(int(value.timestamp()))
    return str(int(value))


async def execute_get(
    http_client: httpx.AsyncClient,
    url: str,
    params: dict[str, str],
    timeout: float,
) -> bytes:
    """
    GET a query endpoint and return the body of a 200 response.

    Raises:
        TransportError: If no response arrived within ``timeout``
        ProtocolError: If the status is not 200
    """
    try:
        response = await asyncio.wait_for(http_client.get(url, params=params), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TransportError(
            f"PromQL request timed out after {timeout}s",
            details={"url": url, "timeout": timeout},
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransportError.from_exception(
            e,
            message=f"failed to make PromQL request: {e}",
            url=url,
        ) from e

    if response.status_code != httpx.codes.OK:
        body = response.text
        raise ProtocolError(
            f"unexpected status code {response.status_code} getting PromQL results: {body}",
            details={"url": url, "status_code": response.status_code, "body": body[:500]},
        )
    return response.content


class LogCacheClient:
    """
    Instant and range PromQL queries against log-cache.

    Attributes:
        base_url: log-cache address, without the ``/api/v1`` suffix
        sanitizer: Rewrites application names to GUIDs before sending
        sanitize_timeout: Bound on sanitizing, in seconds
        request_timeout: Bound on the HTTP request, in seconds
    """

    def __init__(
        self,
        base_url: str,
        sanitizer: Sanitizer,
        http_client: httpx.AsyncClient,
        sanitize_timeout: float = DEFAULT_SANITIZE_TIMEOUT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.sanitizer = sanitizer
        self.sanitize_timeout = sanitize_timeout
        self.request_timeout = request_timeout
        self._http = http_client

    async def query(self, query_text: str) -> QueryResult:
        """
        Execute an instant PromQL query.

        Args:
            query_text: PromQL expression, possibly using application names
                as ``source_id`` values

        Returns:
            Decoded result (vector of samples or matrix of series)

        Raises:
            PromQLParseError: Query is not valid PromQL
            ResolutionError: An application name could not be resolved
            TransportError: Backend unreachable or request timed out
            ProtocolError: Non-200 status or malformed result body
        """
        sanitized = await self._sanitize(query_text)
        return await self._fetch(QUERY_ENDPOINT, {"query": sanitized})

    async def query_range(
        self,
        query_text: str,
        start: datetime | int | float,
        end: datetime | int | float,
        step: timedelta | int | float,
    ) -> QueryResult:
        """
        Execute a PromQL range query.

        ``start`` and ``end`` are sent as whole Unix seconds and ``step`` as
        a duration string such as ``5s`` or ``1m30s``.

        Raises:
            Same as :meth:`query`
        """
        sanitized = await self._sanitize(query_text)
        params = {
            "query": sanitized,
            "start": _unix_seconds(start),
            "end": _unix_seconds(end),
            "step": format_duration(step),
        }
        return await self._fetch(QUERY_RANGE_ENDPOINT, params)

    async def _sanitize(self, query_text: str) -> str:
        try:
            return await asyncio.wait_for(
                self.sanitizer.sanitize(query_text), timeout=self.sanitize_timeout
            )
        except asyncio.TimeoutError as e:
            raise ResolutionError(
                f"sanitizing query timed out after {self.sanitize_timeout}s",
                details={"query": query_text, "timeout": self.sanitize_timeout},
            ) from e

    async def _fetch(self, endpoint: str, params: dict[str, str]) -> QueryResult:
        url = f"{self.base_url}{endpoint}"

        logger.debug("Executing PromQL query", url=url, promql=params["query"])

        body = await execute_get(self._http, url, params, self.request_timeout)
        try:
            result = decode_query_result(body)
        except ResultDecodeError as e:
            e.with_context(url=url)
            raise

        logger.debug(
            "PromQL query succeeded",
            url=url,
            result_type=result.result_type,
            results=len(result.result),
        )
        return result
