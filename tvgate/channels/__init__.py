"""Channel list storage and import."""

from tvgate.channels.parser import M3UParser, parse_channel_text
from tvgate.channels.store import DEFAULT_CHANNELS, ChannelStore

__all__ = [
    "DEFAULT_CHANNELS",
    "ChannelStore",
    "M3UParser",
    "parse_channel_text",
]
