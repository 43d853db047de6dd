"""
Platform API (CAPI v3) Client
=============================

Asynchronous HTTP client for the few platform API operations the service
needs:

- resolve an application name to its GUID (used by the sanitizer)
- read and set an application's environment variables (used to persist
  registered queries)
- restart an application (so it picks up the new environment)

AUTHENTICATION
--------------
In the default deployment the platform API is reached over plain HTTP
through ``HTTP_PROXY``, which injects credentials. When ``token`` is set, it
is sent as a bearer token instead.

RETRY STRATEGY
--------------
Connection errors and timeouts are retried with exponential backoff and
jitter (tenacity). Status errors are not retried: a 404 or 403 would fail
again.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from promql_trigger.core.config.constants import DEFAULT_CAPI_TIMEOUT
from promql_trigger.core.exceptions import ProtocolError, ResolutionError, TransportError
from promql_trigger.core.logging import get_logger

logger = get_logger(__name__)


class CapiConfig(BaseModel):
    """
    Configuration for the platform API client.

    Attributes:
        base_url: Platform API address
        space_guid: Space that name lookups are scoped to
        token: Optional bearer token
        timeout: Per-request timeout in seconds
        max_retries: Attempts for transient failures
        retry_base_delay: Initial delay between retries (seconds)
        retry_max_delay: Maximum delay between retries (seconds)
    """

    model_config = {"frozen": True}

    base_url: str = Field(..., min_length=1, description="Platform API address")
    space_guid: str = Field(..., min_length=1, description="Space GUID for name lookups")
    token: str | None = Field(default=None, description="Bearer token")
    timeout: float = Field(default=DEFAULT_CAPI_TIMEOUT, gt=0, le=60, description="Request timeout (s)")
    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts for transient failures")
    retry_base_delay: float = Field(default=0.5, ge=0, le=10, description="Initial retry delay (s)")
    retry_max_delay: float = Field(default=5.0, ge=0, le=60, description="Maximum retry delay (s)")


class CapiClient:
    """
    Platform API client.

    Implements the ``GuidResolver`` protocol for the sanitizer.
    """

    def __init__(self, config: CapiConfig, http_client: httpx.AsyncClient):
        self.config = config
        self._http = http_client
        self._base_url = config.base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"bearer {self.config.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request with retries on transient failures.

        Raises:
            TransportError: Retries exhausted on connection errors or timeouts
            ProtocolError: The platform answered with a non-2xx status
        """
        url = f"{self._base_url}{path}"

        @retry(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential_jitter(
                initial=self.config.retry_base_delay,
                max=self.config.retry_max_delay,
            ),
            retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
            reraise=True,
        )
        async def _do_request() -> httpx.Response:
            return await self._http.request(
                method, url, headers=self._headers(), timeout=self.config.timeout, **kwargs
            )

        try:
            response = await _do_request()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError.from_exception(
                e, message=f"platform API request failed: {method} {path}: {e}", url=url
            ) from e

        if not response.is_success:
            raise ProtocolError(
                f"unexpected status code {response.status_code} from platform API: {method} {path}",
                details={
                    "url": url,
                    "status_code": response.status_code,
                    "body": response.text[:500],
                },
            )
        return response

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            document = response.json()
        except ValueError as e:
            raise ProtocolError.from_exception(
                e, message="platform API returned invalid JSON", url=str(response.request.url)
            ) from e
        if not isinstance(document, dict):
            raise ProtocolError("platform API returned a non-object JSON document")
        return document

    async def get_app_guid(self, app_name: str) -> str:
        """
        Resolve an application name to its GUID within the configured space.

        Raises:
            ResolutionError: No application with that name exists in the space
            TransportError / ProtocolError: The lookup itself failed
        """
        response = await self._request(
            "GET",
            "/v3/apps",
            params={"names": app_name, "space_guids": self.config.space_guid},
        )
        resources = self._json(response).get("resources") or []
        if not resources or not isinstance(resources[0], dict) or not resources[0].get("guid"):
            raise ResolutionError(
                f"no app named {app_name} in space",
                details={"identifier": app_name, "space_guid": self.config.space_guid},
            )

        guid = resources[0]["guid"]
        logger.debug("Resolved app name", app_name=app_name, app_guid=guid)
        return guid

    async def set_environment_variables(self, app_guid: str, variables: dict[str, str]) -> None:
        """Merge ``variables`` into the app's environment variables."""
        await self._request(
            "PATCH",
            f"/v3/apps/{app_guid}/environment_variables",
            json={"var": variables},
        )
        logger.info(
            "Updated app environment variables",
            app_guid=app_guid,
            variables=sorted(variables),
        )

    async def restart(self, app_guid: str) -> None:
        """Restart an app so it picks up a new environment."""
        await self._request("POST", f"/v3/apps/{app_guid}/actions/restart")
        logger.info("Requested app restart", app_guid=app_guid)
