"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from promql_trigger.config import settings as settings_module
from tests.test_fixtures import DictResolver, RecordingBackend, RegisteredQueryFactory

VCAP_APPLICATION = {
    "cf_api": "https://api.sys.example.com",
    "application_id": "trigger-app-guid",
    "space_id": "space-guid",
}


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings_env(monkeypatch, tmp_path):
    """
    Minimal valid environment for Settings.

    Runs from an empty directory so a developer's ``.env`` never leaks in,
    and resets the settings singleton around the test.
    """
    monkeypatch.chdir(tmp_path)
    for name in ("QUERIES", "INTERVAL", "DELIVERY_MODE", "CAPI_TOKEN", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)

    env = {
        "PORT": "8080",
        "VCAP_APPLICATION": json.dumps(VCAP_APPLICATION),
        "CF_FAAS_ADDR": "faas.example.com:8080",
    }
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    monkeypatch.setattr(settings_module, "_settings", None)
    yield env
    settings_module._settings = None


@pytest.fixture
def make_settings(settings_env):
    """Build Settings from the test environment plus keyword overrides."""

    def _make(**overrides):
        return settings_module.load_settings(**overrides)

    return _make


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def resolver():
    """GUID resolver knowing a handful of application names."""
    return DictResolver({"s": "guid-s", "m": "guid-m", "my-app": "guid-my-app"})


@pytest.fixture
def backend():
    """Scripted HTTP backend recording every request."""
    return RecordingBackend()


@pytest_asyncio.fixture
async def http_client(backend):
    """httpx.AsyncClient wired to the scripted backend."""
    async with backend.client() as client:
        yield client


@pytest.fixture
def registered_query():
    """A registered query with a full webhook URL."""
    return RegisteredQueryFactory.basic()


@pytest.fixture
def mock_query_client():
    """QueryClient double; configure ``query`` per test."""
    client = MagicMock()
    client.query = AsyncMock()
    return client


@pytest.fixture
def mock_presence_client():
    """PresenceClient double; configure ``has_data`` per test."""
    client = MagicMock()
    client.has_data = AsyncMock(return_value=False)
    return client


@pytest.fixture
def mock_state_store():
    """StateStore double recording saved query lists."""
    store = MagicMock()
    store.save_state = AsyncMock()
    return store
