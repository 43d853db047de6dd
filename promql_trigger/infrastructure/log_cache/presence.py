"""
Log-Cache Presence Client

Boolean variant of the PromQL client used by the ``context`` delivery mode.
It sends the query as registered (no name resolution) and only reports
whether the result list is non-empty, so the result body is never typed.
"""

import httpx
import orjson

from promql_trigger.core.config.constants import DEFAULT_REQUEST_TIMEOUT, QUERY_ENDPOINT
from promql_trigger.core.exceptions import ResultDecodeError
from promql_trigger.core.logging import get_logger
from promql_trigger.infrastructure.log_cache.client import execute_get

logger = get_logger(__name__)


class LogCachePresenceClient:
    """Answers "does this query currently return anything?"."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._http = http_client

    async def has_data(self, query_text: str) -> bool:
        """
        Raises:
            TransportError: Backend unreachable or request timed out
            ProtocolError: Non-200 status or a body that is not a result document
        """
        url = f"{self.base_url}{QUERY_ENDPOINT}"
        body = await execute_get(self._http, url, {"query": query_text}, self.request_timeout)

        try:
            document = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise ResultDecodeError.from_exception(
                e, message=f"failed to parse PromQL results: {e}", url=url
            ) from e

        data = document.get("data") if isinstance(document, dict) else None
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, (list, type(None))):
            raise ResultDecodeError(
                "failed to parse PromQL results: data.result must be a list",
                details={"url": url},
            )

        present = bool(result)
        logger.debug("PromQL presence check", url=url, has_data=present)
        return present
