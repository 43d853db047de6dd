"""
Unit Tests for Application Wiring

Tests component construction, the lifespan (scheduler start and stop) and
the command line entry point.
"""

import json
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from promql_trigger.application import app as app_module
from promql_trigger.application.app import build_components, build_readers, create_app, main
from promql_trigger.core.config import DeliveryMode
from promql_trigger.infrastructure.log_cache import LogCacheClient, LogCachePresenceClient
from tests.test_fixtures import QueryResultFactory, RecordingBackend, RegisteredQueryFactory


@pytest.fixture
def queries_env(monkeypatch, settings_env):
    """Persist one registered query in the environment."""
    query = RegisteredQueryFactory.basic(query='metric{source_id="my-app"}', path="/1-prom-ql", context="ctx")
    monkeypatch.setenv("QUERIES", RegisteredQueryFactory.queries_env(query))
    return query


@pytest.mark.unit
class TestComponentWiring:
    """Test building the service components from settings."""

    def test_result_mode_components(self, make_settings, queries_env):
        """Test the default wiring with name resolution."""
        settings = make_settings()
        http_client = httpx.AsyncClient()

        components = build_components(settings, http_client)

        assert isinstance(components["query_client"], LogCacheClient)
        assert components["query_client"].base_url == "http://log-cache.sys.example.com"
        assert components["capi_client"].config.base_url == "http://api.sys.example.com"
        assert components["capi_client"].config.space_guid == "space-guid"
        assert components["state_saver"].app_guid == "trigger-app-guid"
        assert len(components["scheduler"].readers) == 1

    def test_context_mode_components(self, make_settings, queries_env):
        """Test that CONTEXT delivery uses the presence client."""
        settings = make_settings(DELIVERY_MODE=DeliveryMode.CONTEXT)

        components = build_components(settings, httpx.AsyncClient())

        assert isinstance(components["query_client"], LogCachePresenceClient)
        assert components["scheduler"].readers[0].mode is DeliveryMode.CONTEXT

    def test_readers_target_gateway(self, make_settings, queries_env):
        """Test that webhook paths are turned into gateway URLs."""
        settings = make_settings()
        http_client = httpx.AsyncClient()
        client = build_components(settings, http_client)["query_client"]

        readers = build_readers(settings, client, http_client)

        assert readers[0].path == "http://faas.example.com:8080/1-prom-ql"
        assert readers[0].query.context == "ctx"

    def test_scheduler_settings(self, make_settings):
        """Test that interval and concurrency are passed to the scheduler."""
        settings = make_settings(INTERVAL="250ms", MAX_CONCURRENCY=4)

        scheduler = build_components(settings, httpx.AsyncClient())["scheduler"]

        assert scheduler.interval == 0.25
        assert scheduler.max_concurrency == 4
        assert scheduler.readers == []


@pytest.mark.unit
class TestLifespan:
    """Test application startup and shutdown."""

    def test_scheduler_runs_during_lifespan(self, make_settings):
        """Test that the scheduler starts with the app and stops with it."""
        backend = RecordingBackend()
        app = create_app(make_settings(), http_client=backend.client())

        with TestClient(app) as client:
            scheduler = app.state.scheduler
            deadline = time.monotonic() + 5
            while not scheduler.is_running and time.monotonic() < deadline:
                time.sleep(0.01)

            assert client.get("/health").json()["status"] == "healthy"

        assert not scheduler.is_running

    def test_end_to_end_delivery(self, make_settings, queries_env):
        """Test that a registered query is polled and delivered to the gateway."""
        delivered = []

        def webhook(request):
            delivered.append(request)
            return httpx.Response(200)

        backend = RecordingBackend()
        backend.add("GET", "/v3/apps", httpx.Response(200, json={"resources": [{"guid": "guid-my-app"}]}))
        backend.add("GET", "/api/v1/query", httpx.Response(200, content=QueryResultFactory.vector()))
        backend.add("POST", "/1-prom-ql", webhook)
        app = create_app(make_settings(INTERVAL="10ms"), http_client=backend.client())

        with TestClient(app):
            deadline = time.monotonic() + 5
            while not delivered and time.monotonic() < deadline:
                time.sleep(0.01)

        assert delivered, "webhook was never called"
        request = delivered[0]
        assert request.url.host == "faas.example.com"
        assert json.loads(request.content)["context"] == "ctx"
        query = backend.last("GET", "/api/v1/query")
        assert query.url.host == "log-cache.sys.example.com"
        assert query.url.params["query"] == 'metric{source_id="guid-my-app"}'


@pytest.mark.unit
class TestMain:
    """Test the command line entry point."""

    def test_invalid_config_exits(self, settings_env, monkeypatch):
        """Test that missing configuration exits with status 1."""
        monkeypatch.delenv("PORT")

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1

    def test_runs_uvicorn(self, settings_env, monkeypatch):
        """Test that uvicorn is started on the configured port."""
        calls = {}

        def fake_run(app, **kwargs):
            calls.update(kwargs, app=app)

        monkeypatch.setattr("uvicorn.run", fake_run)

        main()

        assert calls["port"] == 8080
        assert calls["host"] == "0.0.0.0"
        assert calls["app"].title == app_module.get_settings().APP_NAME
