"""
Configuration options for cdp-capture.

Options are validated with pydantic and can be built from environment
variables, with explicit values taking precedence.
"""

from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator

from .defaults import (
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_POOL_URL,
    DEFAULT_TIMEOUT,
)
from .env import load_env_config


class ConfigurationError(Exception):
    """Configuration loading or validation error."""

    pass


class ClientOptions(BaseModel):
    """Options for locating and talking to a browser."""

    ws_url: Optional[str] = Field(None, description="Browser protocol WebSocket URL")
    pool_url: str = Field(DEFAULT_POOL_URL, description="Browser pool manager URL")
    launch_settings: Optional[str] = Field(
        None, description="Token asking the pool manager for a fresh browser"
    )
    timeout: Optional[float] = Field(
        DEFAULT_TIMEOUT, description="Call timeout in seconds, None waits forever"
    )
    max_message_size: int = Field(DEFAULT_MAX_MESSAGE_SIZE, ge=1024)
    output_dir: str = Field(DEFAULT_OUTPUT_DIR, description="Directory for artifacts")

    @field_validator("ws_url")
    @classmethod
    def validate_ws_url(cls, v: Optional[str]) -> Optional[str]:
        """Require a ws:// or wss:// URL."""
        if v is None:
            return None
        if urlparse(v).scheme not in ("ws", "wss"):
            raise ValueError(f"Expected a ws:// or wss:// URL, got {v!r}")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("pool_url")
    @classmethod
    def validate_pool_url(cls, v: str) -> str:
        if urlparse(v).scheme not in ("http", "https"):
            raise ValueError(f"Expected an http:// or https:// URL, got {v!r}")
        return v.rstrip("/")

    @classmethod
    def create(cls, **values: Any) -> "ClientOptions":
        """Build options, raising ConfigurationError on invalid values."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientOptions":
        """Build options from environment variables.

        Args:
            **overrides: Values taking precedence over the environment.
                None values are ignored.

        Returns:
            Validated options.
        """
        try:
            values = load_env_config()
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment value: {e}") from e
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.create(**values)
