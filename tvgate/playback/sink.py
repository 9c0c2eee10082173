"""
Playback sinks.

A sink receives a resolved stream address and does the actual transport and
rendering. The session controller is the only caller; it always stops the
sink before handing it a new address.
"""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

from tvgate.config import PlaybackConfig

logger = logging.getLogger(__name__)

STOP_GRACE_SECONDS = 5.0


class PlaybackSink(ABC):
    """Outbound playback interface."""

    @abstractmethod
    async def play(self, url: str) -> None:
        """Start playing ``url``."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop the current stream, keeping the sink usable."""

    @abstractmethod
    async def release(self) -> None:
        """Stop and free the sink for good."""

    @property
    @abstractmethod
    def is_playing(self) -> bool:
        """Whether a stream is currently open."""


class NullPlaybackSink(PlaybackSink):
    """Sink that only logs; used headless and in tests."""

    def __init__(self) -> None:
        self.current_url: Optional[str] = None
        self.released = False

    async def play(self, url: str) -> None:
        if self.released:
            raise RuntimeError("Sink already released")
        self.current_url = url
        logger.info(f"Playing {url}")

    async def stop(self) -> None:
        if self.current_url is not None:
            logger.info(f"Stopped {self.current_url}")
        self.current_url = None

    async def release(self) -> None:
        await self.stop()
        self.released = True

    @property
    def is_playing(self) -> bool:
        return self.current_url is not None


class ProcessPlaybackSink(PlaybackSink):
    """
    Plays through an external player process (ffplay or mpv).

    At most one process is open at a time.
    """

    def __init__(
        self,
        player: str = "ffplay",
        player_path: Optional[str] = None,
        user_agent: Optional[str] = None,
        extra_args: Sequence[str] = (),
    ):
        if player not in ("ffplay", "mpv"):
            raise ValueError(f"Unsupported player: {player}")
        self.player = player
        self.player_path = player_path or shutil.which(player) or player
        self.user_agent = user_agent
        self.extra_args = list(extra_args)
        self._process: Optional[asyncio.subprocess.Process] = None
        self._released = False

    def build_command(self, url: str) -> list[str]:
        if self.player == "mpv":
            cmd = [self.player_path, "--really-quiet", "--force-window=yes"]
            if self.user_agent:
                cmd.append(f"--user-agent={self.user_agent}")
        else:
            cmd = [self.player_path, "-hide_banner", "-loglevel", "warning"]
            if self.user_agent:
                cmd.extend(["-user_agent", self.user_agent])
        cmd.extend(self.extra_args)
        cmd.append(url)
        return cmd

    async def play(self, url: str) -> None:
        if self._released:
            raise RuntimeError("Sink already released")
        if self._process is not None:
            await self.stop()

        cmd = self.build_command(url)
        logger.debug(f"Player command: {' '.join(cmd)}")
        self._process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        logger.info(f"{self.player} started (pid {self._process.pid})")

    async def stop(self) -> None:
        process = self._process
        if process is None:
            return

        # The handle is dropped only once the process is gone, so a stop
        # interrupted by cancellation is finished by the next one.
        if process.returncode is None:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=STOP_GRACE_SECONDS)
            except asyncio.TimeoutError:
                logger.warning(f"{self.player} (pid {process.pid}) ignored terminate, killing")
                process.kill()
                await process.wait()
            logger.info(f"{self.player} stopped (pid {process.pid})")
        self._process = None

    async def release(self) -> None:
        await self.stop()
        self._released = True

    @property
    def is_playing(self) -> bool:
        return self._process is not None and self._process.returncode is None


def create_sink(playback: PlaybackConfig) -> PlaybackSink:
    """Build the sink named by the playback configuration."""
    if playback.player == "none":
        return NullPlaybackSink()
    return ProcessPlaybackSink(
        player=playback.player,
        player_path=playback.player_path,
        user_agent=playback.user_agent,
        extra_args=playback.extra_args,
    )
