"""
State Saver Service

Persists registered queries as the ``QUERIES`` environment variable of this
application and restarts it, so the next process start builds readers from
the new registration.

The write and the restart share one time bound. A restart is only requested
after the environment update succeeded.
"""

import asyncio

from promql_trigger.core.config.constants import DEFAULT_STATE_SAVE_TIMEOUT, QUERIES_ENV_VAR
from promql_trigger.core.exceptions import StatePersistenceError, TriggerError
from promql_trigger.core.logging import get_logger
from promql_trigger.infrastructure.capi import CapiClient
from promql_trigger.polling.models import QueryRegistry, RegisteredQuery

logger = get_logger(__name__)


class StateSaver:
    """Stores the full list of registered queries on the platform."""

    def __init__(
        self,
        app_guid: str,
        capi_client: CapiClient,
        timeout: float = DEFAULT_STATE_SAVE_TIMEOUT,
    ):
        self.app_guid = app_guid
        self.timeout = timeout
        self._capi = capi_client

    async def save_state(self, queries: list[RegisteredQuery]) -> None:
        """
        Persist ``queries`` and restart the application.

        Raises:
            StatePersistenceError: If setting the variable or restarting
                failed or timed out
        """
        data = QueryRegistry(queries=queries).model_dump_json()
        try:
            await asyncio.wait_for(self._save(data), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StatePersistenceError(
                f"saving state timed out after {self.timeout}s",
                details={"app_guid": self.app_guid, "timeout": self.timeout},
            ) from e

        logger.info("Saved registered queries", app_guid=self.app_guid, queries=len(queries))

    async def _save(self, data: str) -> None:
        try:
            await self._capi.set_environment_variables(self.app_guid, {QUERIES_ENV_VAR: data})
        except TriggerError as e:
            raise StatePersistenceError(
                f"setting env vars failed: {e.message}",
                details={"app_guid": self.app_guid, **e.details},
            ) from e

        try:
            await self._capi.restart(self.app_guid)
        except TriggerError as e:
            raise StatePersistenceError(
                f"restarting app failed: {e.message}",
                details={"app_guid": self.app_guid, **e.details},
            ) from e
