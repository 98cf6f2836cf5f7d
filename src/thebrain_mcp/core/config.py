"""
thebrain-mcp Configuration
==========================
Validated configuration with environment variable overrides.

Priority: ENV > YAML > defaults. The loaded BridgeConfig is passed explicitly
into the adapter and server constructors; nothing below the CLI reads the
singleton.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

import yaml

from thebrain_mcp.core.exceptions import ConfigurationError

ENV_PREFIX = "THEBRAIN_"
VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class MCPConfig:
    api_base_url: str = "https://api.thebrain.com"
    api_key: Optional[str] = None
    brain_id: Optional[str] = None
    timeout_seconds: float = 30
    retry_attempts: int = 3
    retry_interval: float = 0.5
    cache_enabled: bool = True


@dataclass(frozen=True)
class ObservabilityConfig:
    log_level: str = "INFO"
    json_logs: bool = False


@dataclass(frozen=True)
class BridgeConfig:
    """Root configuration object."""
    mcp: MCPConfig = field(default_factory=MCPConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)


def _env_override(key: str, default):
    """Check for THEBRAIN_<KEY> environment variable override."""
    env_key = f"{ENV_PREFIX}{key.upper()}"
    val = os.environ.get(env_key)
    if val is None:
        return default
    # Type coercion based on the default's type
    if isinstance(default, bool):
        return val.lower() in ("true", "1", "yes")
    try:
        if isinstance(default, int):
            return int(val)
        if isinstance(default, float):
            return float(val)
    except ValueError as exc:
        raise ConfigurationError(
            f"{env_key} must be numeric, got {val!r}", config_key=env_key
        ) from exc
    return val


def _validate(mcp: MCPConfig, observability: ObservabilityConfig) -> None:
    if mcp.timeout_seconds <= 0:
        raise ConfigurationError(
            f"timeout must be positive, got {mcp.timeout_seconds}", config_key="timeout"
        )
    if mcp.retry_attempts < 0:
        raise ConfigurationError(
            f"retry_attempts must not be negative, got {mcp.retry_attempts}",
            config_key="retry_attempts",
        )
    if mcp.retry_interval < 0:
        raise ConfigurationError(
            f"retry_interval must not be negative, got {mcp.retry_interval}",
            config_key="retry_interval",
        )
    if observability.log_level.upper() not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Unknown log level: {observability.log_level}", config_key="log_level"
        )


def load_config(path: Optional[Path] = None) -> BridgeConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        path: Path to config.yaml. If None, searches ./config.yaml and the
            repository root.

    Returns:
        Validated BridgeConfig instance.

    Raises:
        ConfigurationError: If a value is out of range or not parseable.
    """
    if path is None:
        candidates = [
            Path("config.yaml"),
            Path(__file__).parent.parent.parent.parent / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    raw = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
            raw = loaded.get("thebrain") or {}

    defaults = MCPConfig()
    mcp = MCPConfig(
        api_base_url=_env_override("API_URL", raw.get("api_url", defaults.api_base_url)),
        api_key=_env_override("API_KEY", raw.get("api_key")),
        brain_id=_env_override("BRAIN_ID", raw.get("brain_id")),
        timeout_seconds=_env_override(
            "TIMEOUT", float(raw.get("timeout", defaults.timeout_seconds))
        ),
        retry_attempts=_env_override(
            "RETRY_ATTEMPTS", int(raw.get("retry_attempts", defaults.retry_attempts))
        ),
        retry_interval=_env_override(
            "RETRY_INTERVAL", float(raw.get("retry_interval", defaults.retry_interval))
        ),
        cache_enabled=_env_override(
            "CACHE_ENABLED", bool(raw.get("cache_enabled", defaults.cache_enabled))
        ),
    )

    obs_raw = raw.get("observability") or {}
    observability = ObservabilityConfig(
        log_level=_env_override("LOG_LEVEL", obs_raw.get("log_level", "INFO")).upper(),
        json_logs=_env_override("LOG_JSON", bool(obs_raw.get("json_logs", False))),
    )

    _validate(mcp, observability)
    return BridgeConfig(mcp=mcp, observability=observability)


_CONFIG: Optional[BridgeConfig] = None


def get_config() -> BridgeConfig:
    """Get or initialize the global config singleton."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def reset_config():
    """Reset the global config singleton (useful for testing)."""
    global _CONFIG
    _CONFIG = None
