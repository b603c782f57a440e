"""
Environment variable support for cdp-capture configuration.
"""

import os
from typing import Any, Optional, TypeVar, Union

from .defaults import ENV_PREFIX, LEGACY_URL_ENV

T = TypeVar("T")


def get_env_key(key: str, prefix: str = ENV_PREFIX) -> str:
    """Convert a configuration key to environment variable name.

    Args:
        key: Configuration key (e.g., "pool_url")
        prefix: Environment variable prefix

    Returns:
        Environment variable name (e.g., "CDP_CAPTURE_POOL_URL")
    """
    return f"{prefix}{key.upper().replace('.', '_').replace('-', '_')}"


def parse_value(value: str, target_type: type) -> Any:
    """Parse string value to target type.

    Args:
        value: String value
        target_type: Target type

    Returns:
        Parsed value
    """
    if target_type == int:
        return int(value)
    if target_type == float:
        return float(value)
    return value


def get_env(
    key: str,
    default: Optional[T] = None,
    target_type: Optional[type] = None,
    prefix: str = ENV_PREFIX,
) -> Optional[Union[T, str]]:
    """Get configuration value from environment variable.

    Empty values are treated as unset.

    Args:
        key: Configuration key
        default: Default value if not set
        target_type: Target type for parsing
        prefix: Environment variable prefix

    Returns:
        Parsed value or default
    """
    value = os.environ.get(get_env_key(key, prefix))

    if not value:
        return default

    if target_type is not None:
        return parse_value(value, target_type)

    if default is not None:
        return parse_value(value, type(default))

    return value


# Option name -> type. The variable name is CDP_CAPTURE_ + upper-cased option,
# except ws_url which is read from CDP_CAPTURE_URL.
ENV_OPTIONS: dict[str, type] = {
    "url": str,
    "pool_url": str,
    "launch_settings": str,
    "timeout": float,
    "output_dir": str,
}

ENV_MAPPINGS = {option: (get_env_key(option), target_type) for option, target_type in ENV_OPTIONS.items()}


def load_env_config() -> dict[str, Any]:
    """Load option values from environment variables.

    The bare ``URL`` variable is accepted as an endpoint override when
    ``CDP_CAPTURE_URL`` is not set.

    Returns:
        Dictionary of option values that are set
    """
    result: dict[str, Any] = {}

    for option, target_type in ENV_OPTIONS.items():
        value = get_env(option, target_type=target_type)
        if value is not None:
            result["ws_url" if option == "url" else option] = value

    if "ws_url" not in result:
        legacy = get_env(LEGACY_URL_ENV, prefix="")
        if legacy is not None:
            result["ws_url"] = legacy

    return result
