#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
PromQL trigger service. Configuration is read once at process start; nothing
reloads it while readers are running.

Required environment:
- PORT: HTTP port for the registration endpoint
- VCAP_APPLICATION: platform-provided JSON with ``cf_api``,
  ``application_id`` and ``space_id``
- CF_FAAS_ADDR: host[:port] of the function gateway that receives webhooks

Derived addresses:
- The platform API address has ``https`` rewritten to ``http`` so that
  requests go through ``HTTP_PROXY``, which performs authentication.
- The log-cache address is the platform API address with its first
  ``api`` replaced by ``log-cache``.

Author: System Architect
Date: 2026-03-02
"""

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from promql_trigger.core.config.constants import (
    DEFAULT_CAPI_TIMEOUT,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WEBHOOK_TIMEOUT,
    DeliveryMode,
)
from promql_trigger.core.config.durations import parse_duration
from promql_trigger.core.exceptions import ConfigurationError
from promql_trigger.polling.models import QueryRegistry, RegisteredQuery


class VcapApplication(BaseModel):
    """The subset of VCAP_APPLICATION the service needs."""

    cf_api: str = Field(..., min_length=1, description="Platform API address")
    application_id: str = Field(..., min_length=1, description="GUID of this application")
    space_id: str = Field(..., min_length=1, description="GUID of the space the app runs in")

    @property
    def capi_addr(self) -> str:
        return self.cf_api.replace("https", "http", 1)

    @property
    def log_cache_addr(self) -> str:
        return self.capi_addr.replace("api", "log-cache", 1)


class Settings(BaseSettings):
    """
    Main settings class.

    Usage:
        from promql_trigger.config.settings import get_settings

        settings = get_settings()
        base_url = settings.vcap_application.log_cache_addr
        queries = settings.registered_queries
    """

    # Application
    APP_NAME: str = Field(default="PromQL Trigger", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    PORT: int = Field(..., gt=0, lt=65536, description="Registration endpoint port")

    # Platform
    VCAP_APPLICATION: str = Field(..., description="Platform application JSON")
    CF_FAAS_ADDR: str = Field(..., min_length=1, description="Function gateway host[:port]")
    CAPI_TOKEN: str | None = Field(default=None, description="Bearer token for the platform API")
    CAPI_TIMEOUT: float = Field(default=DEFAULT_CAPI_TIMEOUT, gt=0, description="Platform API timeout (s)")
    CAPI_MAX_RETRIES: int = Field(default=3, ge=1, le=10, description="Attempts for transient platform API failures")
    SKIP_SSL_VALIDATION: bool = Field(default=False, description="Disable TLS certificate checks")

    # Polling
    QUERIES: str = Field(default="", description='Registered queries JSON: {"queries": [...]}')
    INTERVAL: float = Field(default=DEFAULT_INTERVAL_SECONDS, gt=0, description="Poll interval (s or duration string)")
    DELIVERY_MODE: DeliveryMode = Field(default=DeliveryMode.RESULT, description="What a webhook receives")
    MAX_CONCURRENCY: int = Field(default=1, ge=1, description="Readers ticking in parallel")
    QUERY_TIMEOUT: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Per-tick query timeout (s)")
    WEBHOOK_TIMEOUT: float = Field(default=DEFAULT_WEBHOOK_TIMEOUT, gt=0, description="Webhook POST timeout (s)")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("INTERVAL", mode="before")
    @classmethod
    def parse_interval(cls, v):
        """Accept Go-style durations such as ``1s`` or ``500ms``."""
        return parse_duration(v)

    @field_validator("VCAP_APPLICATION")
    @classmethod
    def validate_vcap_application(cls, v):
        """VCAP_APPLICATION must be JSON carrying the platform addresses."""
        VcapApplication.model_validate_json(v)
        return v

    @field_validator("QUERIES")
    @classmethod
    def validate_queries(cls, v):
        """QUERIES is empty or a ``{"queries": [...]}`` document."""
        if v.strip():
            QueryRegistry.model_validate_json(v)
        return v

    @property
    def vcap_application(self) -> VcapApplication:
        """Get the parsed platform application descriptor."""
        return VcapApplication.model_validate_json(self.VCAP_APPLICATION)

    @property
    def registered_queries(self) -> list[RegisteredQuery]:
        """Get the queries persisted by a previous registration."""
        if not self.QUERIES.strip():
            return []
        return QueryRegistry.model_validate_json(self.QUERIES).queries

    def webhook_url(self, path: str) -> str:
        """Full webhook URL for a registered path."""
        return f"http://{self.CF_FAAS_ADDR}{path}"

    def report(self) -> dict[str, Any]:
        """Configuration summary for the startup log, without credentials."""
        vcap = self.vcap_application
        return {
            "port": self.PORT,
            "capi_addr": vcap.capi_addr,
            "log_cache_addr": vcap.log_cache_addr,
            "application_id": vcap.application_id,
            "space_id": vcap.space_id,
            "cf_faas_addr": self.CF_FAAS_ADDR,
            "queries": len(self.registered_queries),
            "interval": self.INTERVAL,
            "delivery_mode": self.DELIVERY_MODE.value,
            "max_concurrency": self.MAX_CONCURRENCY,
            "skip_ssl_validation": self.SKIP_SSL_VALIDATION,
            "capi_token_set": self.CAPI_TOKEN is not None,
        }

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment, failing fast on bad configuration.

    Args:
        **overrides: Field values that take precedence over the environment

    Raises:
        ConfigurationError: If required settings are missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ConfigurationError(
            f"failed to load config: {', '.join(fields)}",
            details={"errors": json.loads(e.json(include_input=False, include_url=False))},
        ) from e


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance

    Raises:
        ConfigurationError: On first call, if the environment is invalid
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = load_settings()
    return _settings
