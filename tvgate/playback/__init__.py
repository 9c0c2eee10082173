"""Playback session and sinks."""

from tvgate.playback.session import PlaybackSessionController, SessionState
from tvgate.playback.sink import (
    NullPlaybackSink,
    PlaybackSink,
    ProcessPlaybackSink,
    create_sink,
)

__all__ = [
    "NullPlaybackSink",
    "PlaybackSessionController",
    "PlaybackSink",
    "ProcessPlaybackSink",
    "SessionState",
    "create_sink",
]
