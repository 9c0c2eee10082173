"""
Player service.

Wires the preflight guard, the time sync engine, the address resolver and
the playback session together, and is the single entry point for input
collaborators (HTTP remote, key mapping, settings UI).

Startup order:
    1. Preflight guard. Failure is fatal and nothing else starts.
    2. Channel list load.
    3. Initial time sync, then periodic resync.
    4. Restore the last played channel.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Optional

from tvgate.channels.store import ChannelStore
from tvgate.clock.time_sync import NtpQuery, TimeSyncEngine, query_ntp_millis
from tvgate.config import TVGateConfig
from tvgate.errors import GuardNotPassed, PreflightFailure
from tvgate.network.preflight import GuardState, NetworkPreflightGuard, Probe, ping_once
from tvgate.network.worker import BackgroundWorker, Dispatcher, direct_dispatcher, loop_dispatcher
from tvgate.playback.session import PlaybackSessionController
from tvgate.playback.sink import PlaybackSink, create_sink
from tvgate.storage.settings_store import SettingsStore
from tvgate.streaming.url_resolver import AddressResolver
from tvgate.tasks.scheduler import TaskScheduler

logger = logging.getLogger(__name__)

RESYNC_TASK = "time_resync"


class PlayerService:
    """Coordinates the playback core for one display."""

    def __init__(
        self,
        config: TVGateConfig,
        sink: Optional[PlaybackSink] = None,
        probe: Optional[Probe] = None,
        ntp_query: NtpQuery = query_ntp_millis,
        worker: Optional[BackgroundWorker] = None,
        guard_sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.settings = SettingsStore(
            config.storage.settings_file, default_server_ip=config.playback.default_server_ip
        )
        self.channel_store = ChannelStore(config.storage.channels_file)
        self.worker = worker or BackgroundWorker()
        self.scheduler = TaskScheduler()
        self._dispatcher: Dispatcher = direct_dispatcher

        network = config.network
        if probe is None:
            ping_path = network.ping_path

            def probe(host: str, timeout: float) -> bool:
                return ping_once(host, timeout, ping_path)

        guard_kwargs: dict[str, Any] = {}
        if guard_sleep is not None:
            guard_kwargs["sleep"] = guard_sleep
        self.guard = NetworkPreflightGuard(
            self.worker,
            host=network.target_host,
            max_tries=network.max_tries,
            probe_timeout=network.probe_timeout,
            retry_interval=network.retry_interval,
            probe=probe,
            dispatcher=self._dispatch,
            **guard_kwargs,
        )

        self.clock = TimeSyncEngine(
            self.worker,
            servers=config.time_sync.servers,
            user_server=self.settings.get_ntp_server,
            timeout=config.time_sync.timeout,
            query=ntp_query,
            dispatcher=self._dispatch,
        )
        self.resolver = AddressResolver(self.clock.current_time_millis, self.settings.get_server_ip)
        self.controller = PlaybackSessionController(
            sink or create_sink(config.playback),
            self.resolver,
            lambda: self.channel_store.channels,
            digit_timeout=config.playback.digit_timeout,
            max_digits=config.playback.max_digits,
        )
        self.controller.add_listener(self._on_channel_changed)

        self._channel_listeners: list[Callable[[int], None]] = []
        self._sync_listeners: list[Callable[[bool, str], None]] = []
        self._guard_listeners: list[Callable[[bool], None]] = []

    def _dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        self._dispatcher(callback, *args)

    # ------------------------------------------------------------ listeners

    def add_channel_listener(self, listener: Callable[[int], None]) -> None:
        self._channel_listeners.append(listener)

    def add_sync_listener(self, listener: Callable[[bool, str], None]) -> None:
        self._sync_listeners.append(listener)

    def add_guard_listener(self, listener: Callable[[bool], None]) -> None:
        self._guard_listeners.append(listener)

    def _emit(self, listeners: list, *args: Any) -> None:
        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                logger.error(f"Listener {listener!r} failed: {e}")

    # -------------------------------------------------------------- startup

    async def start(self) -> None:
        """
        Run the preflight guard and, once it passes, bring playback up.

        Raises:
            PreflightFailure: The required host never answered.
        """
        loop = asyncio.get_running_loop()
        self._dispatcher = loop_dispatcher(loop)

        outcome: asyncio.Future = loop.create_future()

        def on_pass() -> None:
            if not outcome.done():
                outcome.set_result(None)

        def on_fail(error: PreflightFailure) -> None:
            if not outcome.done():
                outcome.set_exception(error)

        logger.info(f"Checking network access via {self.guard.host}")
        self.guard.run(on_pass, on_fail)
        try:
            await outcome
        except PreflightFailure as e:
            logger.critical(f"{PreflightFailure.USER_MESSAGE} ({e})")
            self.controller.stop()
            self._emit(self._guard_listeners, False)
            raise
        self._emit(self._guard_listeners, True)

        self.channel_store.load()

        await asyncio.wrap_future(self.trigger_sync())
        self.scheduler.add_task(
            RESYNC_TASK, self._resync, self.config.time_sync.resync_interval_seconds
        )
        await self.scheduler.start()

        self._restore_last_channel()

    def _restore_last_channel(self) -> None:
        count = len(self.channel_store)
        if count == 0:
            logger.info("Channel list is empty, nothing to restore")
            return
        last = min(max(self.settings.get_last_channel_index(), 0), count - 1)
        self.controller.switch_to(last)

    async def close(self) -> None:
        await self.scheduler.stop()
        await self.controller.close()
        self.worker.shutdown()
        logger.info("Player service closed")

    # ------------------------------------------------------- inbound calls

    def _require_guard(self) -> None:
        if self.guard.state is not GuardState.PASSED:
            raise GuardNotPassed(f"Network guard is {self.guard.state.value}")

    def select_digit(self, digit: int) -> None:
        self._require_guard()
        self.controller.select_digit(digit)

    def cancel_entry(self) -> bool:
        self._require_guard()
        return self.controller.cancel_entry()

    def switch_up(self) -> None:
        self._require_guard()
        self.controller.switch_up()

    def switch_down(self) -> None:
        self._require_guard()
        self.controller.switch_down()

    def switch_to(self, index: int) -> None:
        self._require_guard()
        self.controller.switch_to(index)

    def stop(self) -> None:
        self._require_guard()
        self.controller.stop()

    def trigger_sync(self):
        """Start a time sync; results go to the sync listeners."""
        self._require_guard()
        return self.clock.sync_now(self._on_sync_result)

    def set_server_endpoint(self, server_ip: str) -> None:
        self.settings.set_server_ip(server_ip)
        logger.info(f"Playback server set to {self.settings.get_server_ip()}")

    def set_time_server(self, server: str) -> None:
        """Save the time server override and resync right away."""
        self.settings.set_ntp_server(server)
        logger.info(f"Time server override set to {self.settings.get_ntp_server()}")
        if self.guard.passed:
            self.trigger_sync()

    # ------------------------------------------------------- channel list

    def import_channels(self, content: str) -> bool:
        self._require_guard()
        if not self.channel_store.import_text(content):
            return False
        self.controller.switch_to(0)
        return True

    async def import_channels_url(self, url: str) -> bool:
        self._require_guard()
        if not await self.channel_store.import_url(url):
            return False
        self.controller.switch_to(0)
        return True

    def clear_channels(self) -> None:
        self._require_guard()
        self.controller.stop()
        self.channel_store.clear()

    # ------------------------------------------------------------ internal

    async def _resync(self) -> None:
        result = await asyncio.wrap_future(self.clock.sync_now(self._on_sync_result))
        logger.debug(f"Periodic resync: {result.message}")

    def _on_sync_result(self, success: bool, message: str) -> None:
        self._emit(self._sync_listeners, success, message)

    def _on_channel_changed(self, index: int) -> None:
        self.settings.set_last_channel_index(index)
        self._emit(self._channel_listeners, index)

    def status(self) -> dict[str, Any]:
        last = self.clock.last_result
        return {
            "guard": self.guard.state.value,
            "session": self.controller.snapshot(),
            "channel_count": len(self.channel_store),
            "server_ip": self.settings.get_server_ip(),
            "time_server": self.settings.get_ntp_server(),
            "time_synchronized": self.clock.synchronized,
            "time_offset_ms": self.clock.offset_ms,
            "last_sync": last.message if last else None,
            "current_time_ms": self.clock.current_time_millis(),
        }
