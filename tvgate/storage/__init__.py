"""Persisted settings."""

from tvgate.storage.settings_store import DEFAULT_SERVER_IP, SettingsStore

__all__ = ["DEFAULT_SERVER_IP", "SettingsStore"]
