"""
Tests for cdp-capture configuration.
"""

import os

import pytest

from cdp_capture.config import (
    ENV_MAPPINGS,
    ClientOptions,
    ConfigurationError,
    get_env,
    get_env_key,
    load_env_config,
    parse_value,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration variables inherited from the shell."""
    for env_var, _ in ENV_MAPPINGS.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("URL", raising=False)


class TestEnvironmentVariables:
    """Tests for environment variable helpers."""

    def test_get_env_key(self):
        """Test converting config key to env var name."""
        assert get_env_key("pool_url") == "CDP_CAPTURE_POOL_URL"
        assert get_env_key("launch-settings") == "CDP_CAPTURE_LAUNCH_SETTINGS"

    def test_parse_value(self):
        assert parse_value("1.5", float) == 1.5
        assert parse_value("3", int) == 3
        assert parse_value("text", str) == "text"

    def test_get_env_infers_type_from_default(self):
        os.environ["CDP_CAPTURE_TEST_INT"] = "42"
        try:
            assert get_env("test.int", default=0) == 42
        finally:
            del os.environ["CDP_CAPTURE_TEST_INT"]

    def test_get_env_default(self):
        assert get_env("nonexistent.key", default="default") == "default"

    def test_env_mappings_use_prefixed_keys(self):
        assert ENV_MAPPINGS["url"] == ("CDP_CAPTURE_URL", str)
        assert ENV_MAPPINGS["timeout"] == ("CDP_CAPTURE_TIMEOUT", float)

    def test_get_env_ignores_empty(self, monkeypatch):
        monkeypatch.setenv("CDP_CAPTURE_TIMEOUT", "")
        assert get_env("timeout", 5.0) == 5.0
        monkeypatch.setenv("CDP_CAPTURE_TIMEOUT", "2.5")
        assert get_env("timeout", target_type=float) == 2.5

    def test_load_env_config(self, monkeypatch):
        monkeypatch.setenv("CDP_CAPTURE_URL", "ws://localhost:9222")
        monkeypatch.setenv("CDP_CAPTURE_TIMEOUT", "30")
        monkeypatch.setenv("CDP_CAPTURE_LAUNCH_SETTINGS", "")

        config = load_env_config()

        assert config == {"ws_url": "ws://localhost:9222", "timeout": 30.0}

    def test_legacy_url_variable(self, monkeypatch):
        monkeypatch.setenv("URL", "ws://legacy:9222")
        assert load_env_config()["ws_url"] == "ws://legacy:9222"

    def test_prefixed_url_wins(self, monkeypatch):
        monkeypatch.setenv("URL", "ws://legacy:9222")
        monkeypatch.setenv("CDP_CAPTURE_URL", "ws://new:9222")
        assert load_env_config()["ws_url"] == "ws://new:9222"


class TestClientOptions:
    """Tests for ClientOptions."""

    def test_defaults(self):
        options = ClientOptions()
        assert options.ws_url is None
        assert options.pool_url == "http://localhost:19222"
        assert options.timeout is None
        assert options.output_dir == "."

    def test_rejects_http_ws_url(self):
        with pytest.raises(ConfigurationError):
            ClientOptions.create(ws_url="http://localhost:9222")

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            ClientOptions.create(timeout=0)

    def test_pool_url_trailing_slash(self):
        assert ClientOptions(pool_url="http://pool:19222/").pool_url == "http://pool:19222"

    def test_from_env_with_overrides(self, monkeypatch):
        monkeypatch.setenv("CDP_CAPTURE_URL", "wss://remote/browser")
        monkeypatch.setenv("CDP_CAPTURE_OUTPUT_DIR", "from-env")

        options = ClientOptions.from_env(output_dir="from-cli", timeout=None)

        assert options.ws_url == "wss://remote/browser"
        assert options.output_dir == "from-cli"
        assert options.timeout is None

    def test_from_env_invalid_number(self, monkeypatch):
        monkeypatch.setenv("CDP_CAPTURE_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError):
            ClientOptions.from_env()
