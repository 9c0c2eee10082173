"""
Playback session controller.

Owns which channel is active and the handle to the playback sink.

State machine:

    IDLE      --switch-->   SWITCHING
    SWITCHING --resolved--> PLAYING
    PLAYING   --switch-->   SWITCHING
    PLAYING   --stop-->     STOPPED
    STOPPED   --switch-->   SWITCHING

The upstream network allows two open multicast streams per subscriber. The
controller stays under that by always stopping the sink before giving it a
new address, so it never holds more than one.

All methods must be called from the event loop thread.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any, Optional

from tvgate.models.channel import ChannelDescriptor
from tvgate.playback.sink import PlaybackSink
from tvgate.streaming.url_resolver import AddressResolver

logger = logging.getLogger(__name__)

DIGIT_TIMEOUT = 3.0
MAX_DIGITS = 4

ChannelListener = Callable[[int], None]


class SessionState(str, Enum):
    """Playback session states."""

    IDLE = "idle"
    SWITCHING = "switching"
    PLAYING = "playing"
    STOPPED = "stopped"


class PlaybackSessionController:
    """
    Serializes channel switches onto a single playback sink.

    Every switch cancels the pending numeric entry and any switch still in
    flight, then waits for that switch to unwind before it touches the sink.
    A superseded switch never hands its address to the sink.
    """

    def __init__(
        self,
        sink: PlaybackSink,
        resolver: AddressResolver,
        channels: Callable[[], Sequence[ChannelDescriptor]],
        digit_timeout: float = DIGIT_TIMEOUT,
        max_digits: int = MAX_DIGITS,
    ):
        self._sink = sink
        self._resolver = resolver
        self._channels = channels
        self._digit_timeout = digit_timeout
        self._max_digits = max_digits

        self._state = SessionState.IDLE
        self._target_index: Optional[int] = None
        self._playing_index: Optional[int] = None
        self._playing_url: Optional[str] = None
        self._digits = ""
        self._pending_entry: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._listeners: list[ChannelListener] = []

    # ---------------------------------------------------------------- state

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_index(self) -> Optional[int]:
        """Index of the most recently requested channel."""
        return self._target_index

    @property
    def playing_index(self) -> Optional[int]:
        return self._playing_index

    @property
    def playing_url(self) -> Optional[str]:
        return self._playing_url

    @property
    def digit_buffer(self) -> str:
        return self._digits

    def add_listener(self, listener: ChannelListener) -> None:
        """Register a channel-changed callback, called with the new index."""
        self._listeners.append(listener)

    def snapshot(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "current_index": self._target_index,
            "playing_index": self._playing_index,
            "digit_buffer": self._digits,
            "sink_playing": self._sink.is_playing,
        }

    # ------------------------------------------------------------ switching

    def switch_to(self, index: int) -> Optional[asyncio.Task]:
        """
        Switch to the channel at ``index``.

        Out-of-range indices are ignored without any state change.
        """
        channels = self._channels()
        if not 0 <= index < len(channels):
            logger.debug(f"Ignoring switch to index {index} ({len(channels)} channels)")
            return None

        self._cancel_entry()
        previous = self._supersede()

        channel = channels[index]
        self._state = SessionState.SWITCHING
        self._target_index = index
        logger.info(f"Switching to {channel.number} {channel.name}")

        self._task = asyncio.get_running_loop().create_task(
            self._switch(index, channel, previous)
        )
        return self._task

    def switch_up(self) -> Optional[asyncio.Task]:
        """Previous channel in the list, wrapping to the last."""
        return self._step(-1)

    def switch_down(self) -> Optional[asyncio.Task]:
        """Next channel in the list, wrapping to the first."""
        return self._step(1)

    def _step(self, delta: int) -> Optional[asyncio.Task]:
        count = len(self._channels())
        if count == 0:
            return None
        base = self._target_index if self._target_index is not None else 0
        return self.switch_to((base + delta) % count)

    def stop(self) -> Optional[asyncio.Task]:
        """Stop playback; in-flight switches are cancelled."""
        self._cancel_entry()
        idle = self._task is None or self._task.done()
        if self._state in (SessionState.IDLE, SessionState.STOPPED) and idle:
            return None

        previous = self._supersede()
        self._state = SessionState.STOPPED
        self._playing_index = None
        self._playing_url = None
        self._task = asyncio.get_running_loop().create_task(self._stop(previous))
        return self._task

    async def wait_settled(self) -> None:
        """Wait until the latest switch or stop has finished."""
        while self._task is not None and not self._task.done():
            await asyncio.wait([self._task])

    async def close(self) -> None:
        """Cancel pending work and release the sink."""
        self._cancel_entry()
        previous = self._supersede()
        if previous is not None:
            await asyncio.wait([previous])
        self._task = None
        await self._sink.release()
        if self._state is not SessionState.IDLE:
            self._state = SessionState.STOPPED
        self._playing_index = None
        self._playing_url = None
        logger.info("Playback session closed")

    def _supersede(self) -> Optional[asyncio.Task]:
        previous = self._task
        if previous is not None and not previous.done():
            previous.cancel()
        return previous

    async def _switch(
        self,
        index: int,
        channel: ChannelDescriptor,
        previous: Optional[asyncio.Task],
    ) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])

        try:
            # Release before acquire.
            await self._sink.stop()
            self._playing_index = None
            self._playing_url = None

            url = self._resolver.resolve(channel.url_template)
            await self._sink.play(url)
        except asyncio.CancelledError:
            logger.debug(f"Switch to {channel.number} superseded")
            raise
        except Exception as e:
            logger.error(f"Could not start channel {channel.number} {channel.name}: {e}")
            self._state = SessionState.STOPPED
            return

        self._state = SessionState.PLAYING
        self._playing_index = index
        self._playing_url = url
        logger.info(f"Playing {channel.number} {channel.name}")
        self._notify(index)

    async def _stop(self, previous: Optional[asyncio.Task]) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        try:
            await self._sink.stop()
        except Exception as e:
            logger.error(f"Sink failed to stop: {e}")

    def _notify(self, index: int) -> None:
        for listener in self._listeners:
            try:
                listener(index)
            except Exception as e:
                logger.error(f"Channel listener failed: {e}")

    # -------------------------------------------------------- numeric entry

    def select_digit(self, digit: int) -> None:
        """
        Append a digit to the channel number being typed.

        The number is looked up once no digit has arrived for the idle
        window; every digit restarts the window.
        """
        if not 0 <= digit <= 9:
            raise ValueError(f"Not a digit: {digit}")
        if len(self._digits) < self._max_digits:
            self._digits += str(digit)

        if self._pending_entry is not None:
            self._pending_entry.cancel()
        self._pending_entry = asyncio.get_running_loop().call_later(
            self._digit_timeout, self._commit_entry
        )

    def cancel_entry(self) -> bool:
        """Drop the typed digits. Returns whether anything was pending."""
        pending = bool(self._digits) or self._pending_entry is not None
        self._cancel_entry()
        return pending

    def _cancel_entry(self) -> None:
        if self._pending_entry is not None:
            self._pending_entry.cancel()
            self._pending_entry = None
        self._digits = ""

    def _commit_entry(self) -> None:
        self._pending_entry = None
        digits, self._digits = self._digits, ""
        if not digits:
            return

        index = self.index_of_number(int(digits))
        if index is None:
            logger.debug(f"No channel numbered {digits}")
            return
        self.switch_to(index)

    def index_of_number(self, number: int) -> Optional[int]:
        """Index of the first channel with this number."""
        for index, channel in enumerate(self._channels()):
            if channel.number == number:
                return index
        return None
