"""
TVGate - Time-gated live channel player

Plays live channels from a private IPTV network whose servers only accept
requests carrying a synchronized timestamp:
- NTP-corrected clock independent of the device clock
- Stream address templates with {serverip}, {timestamp}, {starttime}
- Preflight reachability gate for the closed network
- Single-stream playback session with numeric channel entry
"""

__version__ = "1.0.0"
__license__ = "MIT"

from tvgate.config import load_config

__all__ = [
    "__version__",
    "load_config",
]
