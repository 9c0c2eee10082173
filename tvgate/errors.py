"""
Error taxonomy for the playback core.

Only PreflightFailure is fatal. Everything else is reported through callbacks
or ignored, and network-attempt exceptions never leave the attempt that
raised them.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class AttemptError:
    """A failed network attempt, recorded instead of raised."""

    target: str
    attempt: int
    message: str
    timestamp: datetime | None = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.utcnow()


class TVGateError(Exception):
    """Base class for core errors."""


class TimeSyncFailure(TVGateError):
    """Every candidate time server failed or timed out."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


class PreflightFailure(TVGateError):
    """The required internal host never answered."""

    USER_MESSAGE = "Not authorized: use this player inside the correct network."

    def __init__(self, host: str, attempts: int):
        super().__init__(f"{host} unreachable after {attempts} attempts")
        self.host = host
        self.attempts = attempts


class GuardNotPassed(TVGateError):
    """An operation arrived before the preflight guard passed."""
