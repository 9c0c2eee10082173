"""
Active channel list.

The list lives in memory and is saved as ``channels.txt``, one
``number,name,url`` line per channel. A missing file is replaced by the
built-in defaults.
"""

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

import httpx

from tvgate.channels.parser import parse_channel_text, parse_saved_line
from tvgate.models.channel import ChannelDescriptor

logger = logging.getLogger(__name__)

IMPORT_TIMEOUT = 30.0

DEFAULT_CHANNELS = (
    ChannelDescriptor(1, "湖南卫视高清", "http://{serverip}/000000002000/201500000067/index.m3u8?starttime={timestamp}"),
    ChannelDescriptor(2, "湖南经视高清", "http://{serverip}/000000002000/201500000068/index.m3u8?starttime={timestamp}"),
    ChannelDescriptor(3, "湖南都市高清", "http://{serverip}/000000002000/201500000151/index.m3u8?starttime={timestamp}"),
    ChannelDescriptor(16, "CCTV1高清", "http://{serverip}/000000002000/201500000063/index.m3u8?starttime={timestamp}"),
    ChannelDescriptor(17, "CCTV2高清", "http://{serverip}/000000002000/201500000129/index.m3u8?starttime={timestamp}"),
    ChannelDescriptor(18, "CCTV3高清", "http://{serverip}/000000002000/201500000124/index.m3u8?starttime={timestamp}"),
    ChannelDescriptor(204, "CCTV16 4K 超高清", "http://192.168.99.1:7088/udp/239.76.253.230:9000"),
    ChannelDescriptor(205, "CCTV16 4K", "http://192.168.99.1:7088/udp/239.76.254.200:9000"),
    ChannelDescriptor(206, "CCTV 4K", "http://192.168.99.1:7088/udp/239.76.254.64:9000"),
)


class ChannelStore:
    """Owns the active channel list and its file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._channels: list[ChannelDescriptor] = []

    @property
    def channels(self) -> list[ChannelDescriptor]:
        return self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def load(self) -> list[ChannelDescriptor]:
        """Load the saved list, creating the defaults when there is none."""
        if not self.path.exists():
            logger.info(f"No channel file at {self.path}, writing defaults")
            self._channels = list(DEFAULT_CHANNELS)
            self.save()
            return self._channels

        channels = []
        with open(self.path, encoding="utf-8", errors="replace") as f:
            for line in f:
                channel = parse_saved_line(line)
                if channel is not None:
                    channels.append(channel)
        self._channels = channels
        logger.info(f"Loaded {len(channels)} channels from {self.path}")
        return self._channels

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            for channel in self._channels:
                f.write(channel.to_line() + "\n")
        os.replace(tmp_path, self.path)

    def replace(self, channels: list[ChannelDescriptor]) -> bool:
        """Replace the list and save it. An empty list changes nothing."""
        if not channels:
            logger.warning("Import produced no channels, keeping the current list")
            return False
        self._channels = list(channels)
        self.save()
        logger.info(f"Channel list replaced with {len(channels)} channels")
        return True

    def import_text(self, content: str) -> bool:
        return self.replace(parse_channel_text(content))

    def import_file(self, path: Path | str) -> bool:
        with open(path, encoding="utf-8", errors="replace") as f:
            return self.import_text(f.read())

    async def import_url(self, url: str) -> bool:
        """Fetch a playlist over HTTP and import it."""
        if urlparse(url).scheme not in ("http", "https"):
            raise ValueError(f"Not an http(s) URL: {url}")

        logger.info(f"Fetching channel list from {url}")
        async with httpx.AsyncClient(timeout=IMPORT_TIMEOUT, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
        return self.import_text(response.text)

    def clear(self) -> None:
        self._channels = []
        if self.path.exists():
            self.path.unlink()
        logger.info("Channel list cleared")
