"""
Unit tests for the persisted settings store.
"""

import pytest
import yaml

from tvgate.storage.settings_store import SettingsStore


@pytest.mark.unit
class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_defaults_without_file(self, temp_dir):
        store = SettingsStore(temp_dir / "settings.yaml")

        assert store.get_server_ip() == "2.2.2.2:6610"
        assert store.get_ntp_server() is None
        assert store.get_last_channel_index() == 0

    def test_configured_default_server(self, temp_dir):
        store = SettingsStore(temp_dir / "settings.yaml", default_server_ip="10.1.1.1:80")

        assert store.get_server_ip() == "10.1.1.1:80"

    def test_values_survive_reload(self, temp_dir):
        path = temp_dir / "settings.yaml"
        store = SettingsStore(path)
        store.set_server_ip(" 5.5.5.5:6610 ")
        store.set_ntp_server("ntp.example.org")
        store.set_last_channel_index(7)

        reloaded = SettingsStore(path)

        assert reloaded.get_server_ip() == "5.5.5.5:6610"
        assert reloaded.get_ntp_server() == "ntp.example.org"
        assert reloaded.get_last_channel_index() == 7

    def test_clearing_time_server_removes_key(self, temp_dir):
        path = temp_dir / "settings.yaml"
        store = SettingsStore(path)
        store.set_ntp_server("ntp.example.org")

        store.set_ntp_server("   ")

        assert store.get_ntp_server() is None
        assert "ntp_server" not in yaml.safe_load(path.read_text())

    def test_write_leaves_no_temp_file(self, temp_dir):
        store = SettingsStore(temp_dir / "settings.yaml")
        store.set_last_channel_index(3)

        assert sorted(p.name for p in temp_dir.iterdir()) == ["settings.yaml"]

    def test_creates_parent_directory(self, temp_dir):
        path = temp_dir / "data" / "settings.yaml"
        SettingsStore(path).set_last_channel_index(1)

        assert path.exists()

    def test_malformed_file_falls_back_to_defaults(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("- just\n- a list\n")

        store = SettingsStore(path)

        assert store.get_server_ip() == "2.2.2.2:6610"

    def test_bad_last_index_reads_as_zero(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("last_channel_index: nope\n")

        assert SettingsStore(path).get_last_channel_index() == 0
