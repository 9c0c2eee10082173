"""
Configuration management for TVGate.

Handles loading, validation, and access to application configuration.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Remote-control HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8420
    debug: bool = False
    log_level: str = "INFO"


class NetworkGuardConfig(BaseModel):
    """Preflight reachability check settings."""
    target_host: str = "192.168.99.1"
    max_tries: int = 10
    probe_timeout: float = 2.0
    retry_interval: float = 1.0
    ping_path: str = "ping"


class TimeSyncConfig(BaseModel):
    """NTP synchronization settings."""
    servers: list[str] = Field(
        default_factory=lambda: [
            "124.232.139.1",
            "ntp.aliyun.com",
            "time.google.com",
            "ntp.ntsc.ac.cn",
            "1.pool.ntp.org",
        ]
    )
    timeout: float = 5.0
    resync_interval_seconds: int = 3600


class PlaybackConfig(BaseModel):
    """Playback session and player process settings."""
    default_server_ip: str = "2.2.2.2:6610"
    digit_timeout: float = 3.0
    max_digits: int = 4
    user_agent: str = (
        "Dalvik/1.6.0 (Linux; U; Android 4.4.2; IP906H Build/00100499010290600002)"
    )
    player: str = "ffplay"  # ffplay, mpv, or none
    player_path: Optional[str] = None
    extra_args: list[str] = Field(default_factory=list)


class StorageConfig(BaseModel):
    """Locations of the persisted settings and channel list."""
    settings_file: str = "data/settings.yaml"
    channels_file: str = "data/channels.txt"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: str = "logs/tvgate.log"
    max_size: str = "10MB"
    backup_count: int = 5
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class TVGateConfig(BaseModel):
    """Main TVGate configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    network: NetworkGuardConfig = Field(default_factory=NetworkGuardConfig)
    time_sync: TimeSyncConfig = Field(default_factory=TimeSyncConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> TVGateConfig:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. Defaults to config.yaml in project root.

    Returns:
        Loaded and validated configuration.
    """
    if config_path is None:
        config_path = os.environ.get("TVGATE_CONFIG")

    if config_path is None:
        # Look for config.yaml in current directory or project root
        possible_paths = [
            Path("config.yaml"),
            Path(__file__).parent.parent / "config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    env_overrides = _get_env_overrides()
    _deep_merge(config_data, env_overrides)

    return TVGateConfig(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    # Map of environment variables to config paths
    env_map = {
        "TVGATE_HOST": ("server", "host"),
        "TVGATE_PORT": ("server", "port"),
        "TVGATE_DEBUG": ("server", "debug"),
        "TVGATE_GUARD_HOST": ("network", "target_host"),
        "TVGATE_PLAYER": ("playback", "player"),
        "TVGATE_SERVER_IP": ("playback", "default_server_ip"),
        "TVGATE_SETTINGS_FILE": ("storage", "settings_file"),
        "TVGATE_CHANNELS_FILE": ("storage", "channels_file"),
        "TVGATE_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, path in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested(overrides, path, _parse_env_value(value))

    return overrides


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    # Boolean
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    # Integer
    try:
        return int(value)
    except ValueError:
        pass

    # Float
    try:
        return float(value)
    except ValueError:
        pass

    return value


def _set_nested(d: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested dictionary value from a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Deep merge override into base dictionary."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
