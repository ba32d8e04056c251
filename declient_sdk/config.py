"""Configuration for generated clients using Pydantic Settings.

Supports environment variables, .env files and explicit keyword arguments.

Environment variables:
    DECLIENT_HTTP_SERVICES: JSON object mapping service names to base URLs
    DECLIENT_HTTP_TIMEOUT: Request timeout in seconds
    DECLIENT_HTTP_MAX_RETRIES: Retry attempts on timeouts and connection errors
    DECLIENT_HTTP_VERIFY_SSL: Enable TLS verification
"""

from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpClientConfig(BaseSettings):
    """Transport settings shared by every generated client.

    Example:
        From kwargs:
        >>> config = HttpClientConfig(
        ...     services={"users": "https://users.internal:8443"},
        ...     timeout=10.0,
        ... )

        From environment:
        >>> import os
        >>> os.environ["DECLIENT_HTTP_SERVICES"] = '{"users": "http://localhost:8000"}'
        >>> config = HttpClientConfig()
    """

    model_config = SettingsConfigDict(
        env_prefix="DECLIENT_HTTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discovery
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Base URL per logical service name",
    )

    default_scheme: str = Field(
        default="http",
        description="Scheme used for services missing from the map",
    )

    # Timeout settings
    timeout: float = Field(
        default=30.0,
        ge=0.1,
        description="Request timeout in seconds",
    )

    connect_timeout: float = Field(
        default=5.0,
        ge=0.1,
        description="Connection timeout in seconds",
    )

    # Retry settings
    max_retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Retries after timeouts and connection errors",
    )

    retry_backoff_factor: float = Field(
        default=0.5,
        ge=0.0,
        description="Exponential backoff factor (seconds)",
    )

    retry_backoff_max: float = Field(
        default=10.0,
        ge=0.0,
        description="Maximum backoff delay (seconds)",
    )

    # TLS
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates",
    )

    user_agent: str = Field(
        default="declient-sdk-python/0.1.0",
        description="User-Agent header sent with every request",
    )

    def resolve(self, service_name: str) -> str:
        """Base URL of a service: the configured one, else ``<scheme>://<name>``."""
        configured = self.services.get(service_name)
        if configured:
            return configured.rstrip("/")
        return f"{self.default_scheme}://{service_name}"
