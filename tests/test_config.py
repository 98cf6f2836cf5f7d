"""
Tests for configuration loading: defaults, YAML, THEBRAIN_* environment
overrides and range validation.
"""

import pytest
import yaml

from thebrain_mcp.core.config import (
    BridgeConfig,
    MCPConfig,
    get_config,
    load_config,
    reset_config,
)
from thebrain_mcp.core.exceptions import ConfigurationError


def _write_config(tmp_path, section):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"thebrain": section}))
    return path


class TestDefaults:

    def test_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config.mcp.api_base_url == "https://api.thebrain.com"
        assert config.mcp.api_key is None
        assert config.mcp.brain_id is None
        assert config.mcp.timeout_seconds == 30
        assert config.mcp.retry_attempts == 3
        assert config.mcp.retry_interval == 0.5
        assert config.mcp.cache_enabled is True
        assert config.observability.log_level == "INFO"
        assert config.observability.json_logs is False

    def test_config_is_frozen(self):
        config = MCPConfig()
        with pytest.raises(AttributeError):
            config.api_key = "changed"


class TestYamlLoading:

    def test_values_from_yaml(self, tmp_path):
        path = _write_config(tmp_path, {
            "api_url": "https://brain.local",
            "api_key": "yaml-key",
            "brain_id": "yaml-brain",
            "timeout": 12,
            "retry_attempts": 1,
            "cache_enabled": False,
            "observability": {"log_level": "debug", "json_logs": True},
        })

        config = load_config(path)

        assert config.mcp.api_base_url == "https://brain.local"
        assert config.mcp.api_key == "yaml-key"
        assert config.mcp.brain_id == "yaml-brain"
        assert config.mcp.timeout_seconds == 12.0
        assert config.mcp.retry_attempts == 1
        assert config.mcp.cache_enabled is False
        assert config.observability.log_level == "DEBUG"
        assert config.observability.json_logs is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == BridgeConfig()

    def test_missing_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"other": {"api_key": "x"}}))
        assert load_config(path).mcp.api_key is None


class TestEnvOverrides:

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path, {"api_key": "yaml-key", "timeout": 12})
        monkeypatch.setenv("THEBRAIN_API_KEY", "env-key")
        monkeypatch.setenv("THEBRAIN_TIMEOUT", "3.5")

        config = load_config(path)

        assert config.mcp.api_key == "env-key"
        assert config.mcp.timeout_seconds == 3.5

    def test_all_string_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("THEBRAIN_API_URL", "https://env.example.com")
        monkeypatch.setenv("THEBRAIN_BRAIN_ID", "env-brain")
        monkeypatch.setenv("THEBRAIN_LOG_LEVEL", "warning")

        config = load_config(tmp_path / "missing.yaml")

        assert config.mcp.api_base_url == "https://env.example.com"
        assert config.mcp.brain_id == "env-brain"
        assert config.observability.log_level == "WARNING"

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("no", False)])
    def test_bool_coercion(self, tmp_path, monkeypatch, raw, expected):
        monkeypatch.setenv("THEBRAIN_CACHE_ENABLED", raw)
        assert load_config(tmp_path / "missing.yaml").mcp.cache_enabled is expected

    def test_int_coercion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("THEBRAIN_RETRY_ATTEMPTS", "5")

        config = load_config(tmp_path / "missing.yaml")

        assert config.mcp.retry_attempts == 5

    def test_non_numeric_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv("THEBRAIN_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path / "missing.yaml")
        assert exc_info.value.config_key == "THEBRAIN_TIMEOUT"


class TestValidation:

    @pytest.mark.parametrize(
        "section, key",
        [
            ({"timeout": 0}, "timeout"),
            ({"retry_attempts": -1}, "retry_attempts"),
            ({"retry_interval": -0.1}, "retry_interval"),
            ({"observability": {"log_level": "LOUD"}}, "log_level"),
        ],
    )
    def test_out_of_range(self, tmp_path, section, key):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(_write_config(tmp_path, section))
        assert exc_info.value.config_key == key

    def test_zero_retries_allowed(self, tmp_path):
        config = load_config(_write_config(tmp_path, {"retry_attempts": 0}))
        assert config.mcp.retry_attempts == 0


class TestSingleton:

    def test_get_config_is_cached(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first
