"""
Runtime configuration loaded from environment variables.

Settings use the DUCKKIT_ prefix and may also come from a local .env file.
Credentials are held as SecretStr so they never appear in reprs or logs.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from duckkit.capabilities import CompatibilityMode
from duckkit.client import APIClient
from duckkit.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:8080/v1"
DEFAULT_PAGE_SIZE = 1000


class Settings(BaseSettings):
    """Connection and behaviour settings for a plan/apply session."""

    model_config = SettingsConfigDict(
        env_prefix="DUCKKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    host: str = DEFAULT_HOST
    token: Optional[SecretStr] = None
    api_key: Optional[SecretStr] = None

    compatibility_mode: CompatibilityMode = CompatibilityMode.STRICT
    timeout_seconds: float = 30.0
    page_size: int = DEFAULT_PAGE_SIZE

    # Loader
    allow_unknown_fields: bool = False

    @field_validator("compatibility_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: object) -> CompatibilityMode:
        return CompatibilityMode.parse(v)

    @field_validator("page_size")
    @classmethod
    def positive_page_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("page_size must be positive")
        return v

    def has_credentials(self) -> bool:
        return self.token is not None or self.api_key is not None


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]
    logger.debug(
        f"Loaded settings: host={settings.host} "
        f"mode={settings.compatibility_mode.value} page_size={settings.page_size}"
    )
    return settings


def build_client(settings: Settings, transport=None) -> APIClient:
    """
    Build an API client from settings.

    A bearer token wins over an API key when both are configured.

    Args:
        settings: Loaded settings
        transport: Optional httpx transport, used by tests

    Returns:
        Configured APIClient

    Raises:
        ConfigError: If no credential is configured
    """
    if not settings.has_credentials():
        raise ConfigError("no credentials configured: set DUCKKIT_TOKEN or DUCKKIT_API_KEY")

    token = settings.token.get_secret_value() if settings.token else None
    api_key = None
    if token is None and settings.api_key is not None:
        api_key = settings.api_key.get_secret_value()

    return APIClient(
        base_url=settings.host,
        token=token,
        api_key=api_key,
        timeout=settings.timeout_seconds,
        transport=transport,
    )


__all__ = ["Settings", "build_client", "load_settings"]
