"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from restmcp.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_retries
    3
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # RESTMCP_RETRY_MAX_RETRIES=5
    # RESTMCP_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from restmcp import __version__


class RetrySettings(BaseSettings):
    """Retry behaviour for transient transport failures."""

    model_config = SettingsConfigDict(
        env_prefix="RESTMCP_RETRY_",
        extra="ignore",
    )

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    base_delay: PositiveFloat = Field(default=1.0, description="Base delay in seconds")
    max_delay: PositiveFloat = Field(default=30.0, description="Maximum delay in seconds")
    multiplier: PositiveFloat = Field(default=2.0, description="Exponential backoff base")
    jitter: bool = False
    idempotent_only: bool = Field(
        default=False,
        description="Skip retries for POST/PATCH requests",
    )


class HttpSettings(BaseSettings):
    """HTTP client defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RESTMCP_HTTP_",
        extra="ignore",
    )

    user_agent: str = f"restmcp/{__version__}"
    verify_ssl: bool = True
    follow_redirects: bool = True
    max_redirects: PositiveInt = Field(default=5, le=30)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RESTMCP_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class ServerSettings(BaseSettings):
    """MCP server defaults (overridable from the command line)."""

    model_config = SettingsConfigDict(
        env_prefix="RESTMCP_SERVER_",
        extra="ignore",
    )

    name: str = "rest-api-mcp-server"
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    host: str = "127.0.0.1"
    port: PositiveInt = Field(default=8080, le=65535)


class RestMcpSettings(BaseSettings):
    """Root settings.

    Loads configuration from environment variables with the RESTMCP_ prefix.

    Example environment variables:
        RESTMCP_RETRY_MAX_RETRIES=5
        RESTMCP_RETRY_IDEMPOTENT_ONLY=true
        RESTMCP_HTTP_VERIFY_SSL=false
        RESTMCP_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RESTMCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


@lru_cache(maxsize=1)
def get_settings() -> RestMcpSettings:
    """Get the global settings instance (cached)."""
    return RestMcpSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
