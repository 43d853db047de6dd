#!/usr/bin/env python3
"""
FastAPI Application Entry Point

This is the main entry point for the PromQL trigger service. It wires the
platform API client, the sanitizer, the log-cache client and one reader per
registered query, starts the poll scheduler in the background and serves
the registration endpoint.

Author: System Architect
Date: 2026-03-02
"""

import asyncio
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from promql_trigger.application.api.routes.health import router as health_router
from promql_trigger.application.api.routes.registration import router as registration_router
from promql_trigger.application.services.state_saver import StateSaver
from promql_trigger.config.settings import Settings, get_settings
from promql_trigger.core.config.constants import DeliveryMode
from promql_trigger.core.exceptions import ConfigurationError, TriggerError
from promql_trigger.core.logging import get_logger, setup_logging
from promql_trigger.infrastructure.capi import CapiClient, CapiConfig
from promql_trigger.infrastructure.log_cache import LogCacheClient, LogCachePresenceClient
from promql_trigger.polling.models import RegisteredQuery
from promql_trigger.polling.reader import Reader
from promql_trigger.polling.scheduler import PollScheduler
from promql_trigger.promql.sanitizer import Sanitizer

logger = get_logger(__name__)

SCHEDULER_SHUTDOWN_TIMEOUT = 5.0


# ============================================================================
# Component Wiring
# ============================================================================


def build_readers(
    settings: Settings,
    client: LogCacheClient | LogCachePresenceClient,
    http_client: httpx.AsyncClient,
) -> list[Reader]:
    """One reader per registered query, targeting the function gateway."""
    readers = []
    for registered in settings.registered_queries:
        query = RegisteredQuery(
            query=registered.query,
            path=settings.webhook_url(registered.path),
            context=registered.context,
        )
        readers.append(
            Reader(
                query,
                client,
                http_client,
                mode=settings.DELIVERY_MODE,
                tick_timeout=settings.QUERY_TIMEOUT,
                webhook_timeout=settings.WEBHOOK_TIMEOUT,
            )
        )
    return readers


def build_components(settings: Settings, http_client: httpx.AsyncClient) -> dict:
    """Create the service components on top of a shared HTTP client."""
    vcap = settings.vcap_application

    capi_client = CapiClient(
        CapiConfig(
            base_url=vcap.capi_addr,
            space_guid=vcap.space_id,
            token=settings.CAPI_TOKEN,
            timeout=settings.CAPI_TIMEOUT,
            max_retries=settings.CAPI_MAX_RETRIES,
        ),
        http_client,
    )

    if settings.DELIVERY_MODE is DeliveryMode.CONTEXT:
        query_client = LogCachePresenceClient(
            vcap.log_cache_addr, http_client, request_timeout=settings.QUERY_TIMEOUT
        )
    else:
        query_client = LogCacheClient(
            vcap.log_cache_addr,
            Sanitizer(capi_client),
            http_client,
            request_timeout=settings.QUERY_TIMEOUT,
        )

    readers = build_readers(settings, query_client, http_client)
    return {
        "capi_client": capi_client,
        "query_client": query_client,
        "state_saver": StateSaver(vcap.application_id, capi_client),
        "scheduler": PollScheduler(
            readers,
            interval=settings.INTERVAL,
            max_concurrency=settings.MAX_CONCURRENCY,
        ),
    }


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).
    """
    settings: Settings = app.state.settings

    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    logger.info("Starting PromQL trigger", **settings.report())

    injected_client = getattr(app.state, "http_client", None)
    http_client = injected_client or httpx.AsyncClient(verify=not settings.SKIP_SSL_VALIDATION)

    scheduler_task = None
    try:
        components = build_components(settings, http_client)
        app.state.http_client = http_client
        app.state.state_saver = components["state_saver"]
        app.state.scheduler = components["scheduler"]

        scheduler_task = asyncio.create_task(components["scheduler"].run())
        logger.info("Application startup complete", readers=len(components["scheduler"].readers))

        yield

    finally:
        logger.info("Shutting down application")

        if scheduler_task is not None:
            app.state.scheduler.stop()
            try:
                await asyncio.wait_for(scheduler_task, timeout=SCHEDULER_SHUTDOWN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Poll scheduler did not stop in time, cancelling")
                scheduler_task.cancel()
                try:
                    await scheduler_task
                except asyncio.CancelledError:
                    pass

        if injected_client is None:
            await http_client.aclose()

        logger.info("Application shutdown complete")


# ============================================================================
# Application Factory
# ============================================================================


def create_app(settings: Settings | None = None, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment
        http_client: Shared HTTP client to use instead of creating one;
            it is not closed on shutdown

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="PromQL event source: polls queries and invokes webhooks when they return data",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if http_client is not None:
        app.state.http_client = http_client

    app.include_router(health_router)
    app.include_router(registration_router)

    @app.exception_handler(TriggerError)
    async def trigger_exception_handler(request: Request, exc: TriggerError):
        """Handle service-specific exceptions."""
        logger.error(f"Trigger exception: {exc.message}", error_type=type(exc).__name__, kind=exc.kind)
        return JSONResponse(status_code=500, content=exc.to_dict())

    return app


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Load configuration and serve the registration endpoint."""
    import uvicorn

    try:
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.critical(e.message, **e.details)
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host=settings.API_HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
