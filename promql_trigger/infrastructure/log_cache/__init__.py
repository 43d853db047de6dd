"""
Log-Cache Infrastructure

HTTP clients for the log-cache PromQL API.
"""

from .client import LogCacheClient
from .presence import LogCachePresenceClient

__all__ = ["LogCacheClient", "LogCachePresenceClient"]
