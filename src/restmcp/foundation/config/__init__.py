"""Configuration loaded from RESTMCP_* environment variables."""

from .settings import (
    HttpSettings,
    LoggingSettings,
    RestMcpSettings,
    RetrySettings,
    ServerSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "RestMcpSettings",
    "RetrySettings",
    "HttpSettings",
    "LoggingSettings",
    "ServerSettings",
    "get_settings",
    "clear_settings_cache",
]
