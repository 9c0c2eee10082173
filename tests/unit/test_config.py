"""
Unit tests for configuration module.
"""

import os
from unittest.mock import patch

import pytest

from tvgate.config import (
    LoggingConfig,
    NetworkGuardConfig,
    PlaybackConfig,
    ServerConfig,
    TimeSyncConfig,
    TVGateConfig,
    load_config,
)


@pytest.mark.unit
class TestServerConfig:
    """Tests for ServerConfig."""

    def test_default_values(self):
        """Test default server configuration values."""
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8420
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_custom_values(self):
        """Test custom server configuration."""
        config = ServerConfig(host="0.0.0.0", port=9000, debug=True, log_level="DEBUG")

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.debug is True
        assert config.log_level == "DEBUG"


@pytest.mark.unit
class TestNetworkGuardConfig:
    """Tests for NetworkGuardConfig."""

    def test_default_values(self):
        config = NetworkGuardConfig()

        assert config.target_host == "192.168.99.1"
        assert config.max_tries == 10
        assert config.probe_timeout == 2.0


@pytest.mark.unit
class TestTimeSyncConfig:
    """Tests for TimeSyncConfig."""

    def test_builtin_servers_in_order(self):
        config = TimeSyncConfig()

        assert config.servers == [
            "124.232.139.1",
            "ntp.aliyun.com",
            "time.google.com",
            "ntp.ntsc.ac.cn",
            "1.pool.ntp.org",
        ]
        assert config.timeout == 5.0

    def test_servers_are_not_shared_between_instances(self):
        first = TimeSyncConfig()
        first.servers.append("extra.example")

        assert "extra.example" not in TimeSyncConfig().servers


@pytest.mark.unit
class TestPlaybackConfig:
    """Tests for PlaybackConfig."""

    def test_default_values(self):
        config = PlaybackConfig()

        assert config.default_server_ip == "2.2.2.2:6610"
        assert config.digit_timeout == 3.0
        assert config.max_digits == 4
        assert config.player == "ffplay"
        assert config.user_agent.startswith("Dalvik/")


@pytest.mark.unit
class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_default_values(self):
        """Test default logging configuration."""
        config = LoggingConfig()

        assert config.level == "INFO"
        assert "%(asctime)s" in config.format

    def test_custom_level(self):
        config = LoggingConfig(level="DEBUG")

        assert config.level == "DEBUG"


@pytest.mark.unit
class TestTVGateConfig:
    """Tests for main TVGateConfig class."""

    def test_default_config(self):
        config = TVGateConfig()

        assert isinstance(config.server, ServerConfig)
        assert isinstance(config.network, NetworkGuardConfig)
        assert isinstance(config.time_sync, TimeSyncConfig)
        assert isinstance(config.playback, PlaybackConfig)
        assert isinstance(config.logging, LoggingConfig)

    def test_nested_config(self):
        config = TVGateConfig(
            server=ServerConfig(port=9000),
            playback=PlaybackConfig(player="mpv"),
        )

        assert config.server.port == 9000
        assert config.playback.player == "mpv"


@pytest.mark.unit
class TestLoadConfig:
    """Tests for config loading functions."""

    def test_load_from_file(self, temp_config_file):
        config = load_config(str(temp_config_file))

        assert config.server.port == 8421
        assert config.network.target_host == "10.0.0.1"
        assert config.network.max_tries == 3
        assert config.playback.player == "none"
        assert config.playback.digit_timeout == 1.5
        # Untouched sections keep their defaults
        assert config.time_sync.timeout == 5.0

    def test_missing_file_gives_defaults(self, temp_dir):
        config = load_config(str(temp_dir / "absent.yaml"))

        assert config.server.port == 8420

    def test_config_path_from_environment(self, temp_config_file):
        with patch.dict(os.environ, {"TVGATE_CONFIG": str(temp_config_file)}):
            config = load_config()

        assert config.server.port == 8421

    def test_environment_overrides_file(self, temp_config_file):
        env = {"TVGATE_PORT": "9100", "TVGATE_PLAYER": "mpv", "TVGATE_DEBUG": "false"}
        with patch.dict(os.environ, env):
            config = load_config(str(temp_config_file))

        assert config.server.port == 9100
        assert config.server.debug is False
        assert config.playback.player == "mpv"

    def test_each_load_returns_fresh_config(self, temp_config_file):
        config1 = load_config(str(temp_config_file))
        config2 = load_config(str(temp_config_file))

        assert config1 is not config2
        assert config1 == config2
        assert config1.server.port == 8421
