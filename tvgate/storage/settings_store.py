"""Persisted user settings backed by a YAML file."""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

KEY_SERVER_IP = "server_ip"
KEY_NTP_SERVER = "ntp_server"
KEY_LAST_CHANNEL = "last_channel_index"

DEFAULT_SERVER_IP = "2.2.2.2:6610"


class SettingsStore:
    """
    Simple get/set store for the playback server endpoint, the time server
    override and the last played channel.

    Every set rewrites the whole file through a temporary file and a rename.
    """

    def __init__(self, path: Path | str, default_server_ip: str = DEFAULT_SERVER_IP):
        self.path = Path(path)
        self.default_server_ip = default_server_ip
        self._lock = threading.Lock()
        self._data: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read settings from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed settings file {self.path}")
            return {}
        return data

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                self._data, f, sort_keys=False, default_flow_style=False, allow_unicode=True
            )
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value
            self._write()
        logger.debug(f"Setting {key} saved")

    # Typed accessors

    def get_server_ip(self) -> str:
        value = self.get(KEY_SERVER_IP)
        if not value:
            return self.default_server_ip
        return str(value)

    def set_server_ip(self, server_ip: str) -> None:
        self.set(KEY_SERVER_IP, server_ip.strip())

    def get_ntp_server(self) -> Optional[str]:
        value = self.get(KEY_NTP_SERVER)
        return str(value) if value else None

    def set_ntp_server(self, server: Optional[str]) -> None:
        server = server.strip() if server else None
        self.set(KEY_NTP_SERVER, server or None)

    def get_last_channel_index(self) -> int:
        try:
            return int(self.get(KEY_LAST_CHANNEL, 0))
        except (TypeError, ValueError):
            return 0

    def set_last_channel_index(self, index: int) -> None:
        self.set(KEY_LAST_CHANNEL, int(index))
