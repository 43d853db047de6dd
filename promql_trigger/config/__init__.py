"""
Configuration package for the PromQL trigger service.

This package provides centralized, type-safe configuration management
using Pydantic Settings.
"""

from .settings import (
    Settings,
    VcapApplication,
    get_settings,
    load_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "VcapApplication",
    "get_settings",
    "load_settings",
    "reload_settings",
]
