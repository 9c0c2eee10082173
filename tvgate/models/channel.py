"""Channel descriptor."""

from dataclasses import dataclass

SERVER_IP_PLACEHOLDER = "{serverip}"
TIMESTAMP_PLACEHOLDER = "{timestamp}"
STARTTIME_PLACEHOLDER = "{starttime}"


@dataclass(frozen=True)
class ChannelDescriptor:
    """
    One entry of the active channel list.

    Attributes:
        number: Channel number used for numeric selection, unique in the list.
        name: Display name.
        url_template: Stream address, possibly holding placeholders that are
            resolved at play time.
    """

    number: int
    name: str
    url_template: str

    def __post_init__(self):
        if self.number <= 0:
            raise ValueError(f"Channel number must be positive, got {self.number}")

    def to_line(self) -> str:
        """Serialize as a ``number,name,url`` line."""
        return f"{self.number},{self.name},{self.url_template}"

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "name": self.name,
            "url_template": self.url_template,
        }
