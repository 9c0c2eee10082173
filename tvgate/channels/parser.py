"""Channel list parsing for M3U playlists and plain text lists"""

import logging
from dataclasses import dataclass

from tvgate.models.channel import ChannelDescriptor

logger = logging.getLogger(__name__)


@dataclass
class M3UEntry:
    """A single M3U playlist entry"""

    title: str | None = None
    url: str | None = None


class M3UParser:
    """Parser for #EXTINF playlists"""

    @staticmethod
    def is_m3u(content: str) -> bool:
        return "#EXTINF" in content

    @staticmethod
    def parse_extinf_line(line: str) -> M3UEntry:
        """
        Parse an #EXTINF line.

        Format: #EXTINF:-1 tvg-id="..." group-title="..." ,Channel Name
        """
        entry = M3UEntry()

        # The display name is whatever follows the last comma
        if "," in line:
            entry.title = line.rsplit(",", 1)[1].strip()

        return entry

    @staticmethod
    def parse(content: str) -> list[M3UEntry]:
        entries = []
        current_entry = None

        for line in content.splitlines():
            line = line.strip()
            if not line:
                continue

            if line.startswith("#EXTINF"):
                current_entry = M3UParser.parse_extinf_line(line)
            elif current_entry is not None and current_entry.title and line.startswith("http"):
                current_entry.url = line
                entries.append(current_entry)
                current_entry = None

        logger.info(f"Parsed {len(entries)} entries from M3U playlist")
        return entries


_SEPARATORS = (",", " ", "\t")


def parse_text_line(line: str) -> tuple[str, str] | None:
    """
    Split a ``name<sep>url`` line at the last comma, space or tab.

    Returns None unless the name is non-empty and the url starts with http.
    """
    idx = max(line.rfind(sep) for sep in _SEPARATORS)
    if idx <= 0:
        return None
    name = line[:idx].strip()
    url = line[idx + 1:].strip()
    if not name or not url.startswith("http"):
        return None
    return name, url


def clean_name(name: str) -> str:
    """Replace commas so the name survives the saved ``number,name,url`` format."""
    return " ".join(name.replace(",", " ").split())


def parse_channel_text(content: str) -> list[ChannelDescriptor]:
    """
    Parse an imported channel list, numbering channels 1..n in file order.

    M3U content is detected by the presence of #EXTINF; anything else is
    read as one ``name,url`` (or space/tab separated) entry per line.
    Commas inside names become spaces.
    """
    pairs: list[tuple[str, str]] = []

    if M3UParser.is_m3u(content):
        for entry in M3UParser.parse(content):
            pairs.append((entry.title, entry.url))
    else:
        for line in content.splitlines():
            parsed = parse_text_line(line.strip())
            if parsed:
                pairs.append(parsed)

    pairs = [(clean_name(name), url) for name, url in pairs]
    return [
        ChannelDescriptor(number=number, name=name, url_template=url)
        for number, (name, url) in enumerate((p for p in pairs if p[0]), start=1)
    ]


def parse_saved_line(line: str) -> ChannelDescriptor | None:
    """Parse one ``number,name,url`` line of the saved channel file."""
    parts = line.rstrip("\r\n").split(",", 2)
    if len(parts) != 3:
        return None
    try:
        return ChannelDescriptor(number=int(parts[0]), name=parts[1], url_template=parts[2])
    except ValueError:
        logger.warning(f"Skipping malformed channel line: {line.strip()}")
        return None
