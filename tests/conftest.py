"""
TVGate Test Configuration

Shared fixtures and configuration for all tests.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tvgate.config import PlaybackConfig, StorageConfig, TVGateConfig
from tvgate.models.channel import ChannelDescriptor


# ============ Sample Data Fixtures ============


@pytest.fixture
def sample_channels() -> list[ChannelDescriptor]:
    """Ten channels numbered 1..10 with resolvable templates."""
    return [
        ChannelDescriptor(
            number=n,
            name=f"Channel {n}",
            url_template=f"http://{{serverip}}/live/{n}/index.m3u8?starttime={{timestamp}}",
        )
        for n in range(1, 11)
    ]


# ============ Temporary File Fixtures ============


@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(scope="function")
def temp_config_file(temp_dir: Path) -> Path:
    """Create a temporary config file."""
    config_file = temp_dir / "config.yaml"
    config_content = """
server:
  host: "127.0.0.1"
  port: 8421
  debug: true

network:
  target_host: "10.0.0.1"
  max_tries: 3

playback:
  player: "none"
  digit_timeout: 1.5

logging:
  level: "DEBUG"
  format: "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
"""
    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def test_config(temp_dir: Path) -> TVGateConfig:
    """Configuration with files under the temp dir and no player process."""
    return TVGateConfig(
        playback=PlaybackConfig(player="none", digit_timeout=0.05),
        storage=StorageConfig(
            settings_file=str(temp_dir / "settings.yaml"),
            channels_file=str(temp_dir / "channels.txt"),
        ),
    )


# ============ Environment Fixtures ============


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables for each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("TVGATE_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ============ Markers ============


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
    config.addinivalue_line("markers", "network: Network access required")
