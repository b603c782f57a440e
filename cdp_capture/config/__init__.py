"""
Configuration module for cdp-capture.

Example usage:
    from cdp_capture.config import ClientOptions

    options = ClientOptions.from_env(output_dir="out")

Environment variables:
    CDP_CAPTURE_URL=ws://localhost:9222
    CDP_CAPTURE_POOL_URL=http://localhost:19222
    CDP_CAPTURE_LAUNCH_SETTINGS=<token>
    CDP_CAPTURE_TIMEOUT=30
    CDP_CAPTURE_OUTPUT_DIR=out
"""

from .env import (
    ENV_MAPPINGS,
    ENV_OPTIONS,
    get_env,
    get_env_key,
    load_env_config,
    parse_value,
)
from .options import ClientOptions, ConfigurationError

__all__ = [
    "ClientOptions",
    "ConfigurationError",
    "ENV_MAPPINGS",
    "ENV_OPTIONS",
    "get_env",
    "get_env_key",
    "load_env_config",
    "parse_value",
]
