"""
NTP-backed clock for request timestamps.

The upstream servers reject requests whose timestamp drifts from network
time, and the device clock can be changed by the user. The engine measures
network time once per sync and keeps only the offset against the monotonic
clock:

    offset = network_time_ms - monotonic_ms

so that ``monotonic_ms + offset`` tracks network time between syncs and is
unaffected by wall clock changes.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import ntplib

from tvgate.errors import AttemptError, TimeSyncFailure
from tvgate.network.worker import BackgroundWorker, Dispatcher, direct_dispatcher

logger = logging.getLogger(__name__)

DEFAULT_NTP_SERVERS = (
    "124.232.139.1",
    "ntp.aliyun.com",
    "time.google.com",
    "ntp.ntsc.ac.cn",
    "1.pool.ntp.org",
)
NTP_TIMEOUT = 5.0

# query(host, timeout) -> network time in milliseconds
NtpQuery = Callable[[str, float], int]
SyncCallback = Callable[[bool, str], None]


def query_ntp_millis(host: str, timeout: float) -> int:
    """
    Ask one NTP server for the current time.

    ntplib resolves the host, opens a UDP socket with the given timeout and
    closes it before returning or raising.

    Returns:
        Network time at the moment the reply arrived, in milliseconds.
    """
    client = ntplib.NTPClient()
    stats = client.request(host, version=3, timeout=timeout)
    return int(round((stats.dest_time + stats.offset) * 1000))


def candidate_servers(user_server: Optional[str], builtin: Iterable[str]) -> list[str]:
    """User override first, then built-ins; blanks dropped, first occurrence kept."""
    ordered: list[str] = []
    seen: set[str] = set()
    for server in [user_server, *builtin]:
        if server is None:
            continue
        server = server.strip()
        if not server or server in seen:
            continue
        seen.add(server)
        ordered.append(server)
    return ordered


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def _wall_ms() -> int:
    return time.time_ns() // 1_000_000


def format_utc(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).isoformat(timespec="seconds")


class OffsetCell:
    """Lock-guarded holder of the clock offset; written only by its engine."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[int] = None

    def get(self) -> Optional[int]:
        with self._lock:
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    success: bool
    message: str
    server: Optional[str] = None
    offset_ms: Optional[int] = None
    attempts: list[AttemptError] = field(default_factory=list)
    error: Optional[TimeSyncFailure] = None


class TimeSyncEngine:
    """
    Keeps a network-corrected clock.

    Usage:
        engine = TimeSyncEngine(worker, user_server=settings.get_ntp_server)
        engine.sync_now(lambda ok, msg: print(msg))
        now = engine.current_time_millis()
    """

    def __init__(
        self,
        worker: BackgroundWorker,
        servers: Sequence[str] = DEFAULT_NTP_SERVERS,
        user_server: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = NTP_TIMEOUT,
        query: NtpQuery = query_ntp_millis,
        dispatcher: Dispatcher = direct_dispatcher,
        monotonic_ms: Callable[[], int] = _monotonic_ms,
        wall_ms: Callable[[], int] = _wall_ms,
    ):
        self._worker = worker
        self._servers = tuple(servers)
        self._user_server = user_server
        self._timeout = timeout
        self._query = query
        self._dispatcher = dispatcher
        self._monotonic_ms = monotonic_ms
        self._wall_ms = wall_ms
        self._offset = OffsetCell()
        self.last_result: Optional[SyncResult] = None

    @property
    def offset_ms(self) -> Optional[int]:
        """Committed offset, or None if never synchronized."""
        return self._offset.get()

    @property
    def synchronized(self) -> bool:
        return self._offset.get() is not None

    def current_time_millis(self) -> int:
        """Network-corrected time, or the device wall clock before the first sync."""
        offset = self._offset.get()
        if offset is None:
            return self._wall_ms()
        return self._monotonic_ms() + offset

    def candidate_servers(self) -> list[str]:
        user = None
        if self._user_server is not None:
            try:
                user = self._user_server()
            except Exception as e:
                logger.warning(f"Could not read time server override: {e}")
        return candidate_servers(user, self._servers)

    def sync_now(self, on_complete: Optional[SyncCallback] = None) -> "Future[SyncResult]":
        """
        Start one sync attempt on the background worker.

        Never raises. ``on_complete(success, message)`` is delivered through the
        dispatcher once the attempt finishes.
        """
        try:
            future = self._worker.submit(self._sync)
        except RuntimeError as e:
            logger.warning(f"Time sync not started: {e}")
            future = Future()
            future.set_result(
                SyncResult(success=False, message=f"Time sync failed: {e}")
            )

        if on_complete is not None:
            future.add_done_callback(lambda f: self._deliver(f, on_complete))
        return future

    def _deliver(self, future: "Future[SyncResult]", on_complete: SyncCallback) -> None:
        if future.cancelled():
            return
        result = future.result()
        self._dispatcher(on_complete, result.success, result.message)

    def _sync(self) -> SyncResult:
        servers = self.candidate_servers()
        attempts: list[AttemptError] = []
        last_error: Optional[Exception] = None

        for number, server in enumerate(servers, start=1):
            try:
                logger.debug(f"Trying NTP server {server}")
                network_ms = self._query(server, self._timeout)
            except Exception as e:
                logger.warning(f"Time sync with {server} failed: {e}")
                attempts.append(AttemptError(target=server, attempt=number, message=str(e)))
                last_error = e
                continue

            offset = network_ms - self._monotonic_ms()
            self._offset.set(offset)
            logger.info(f"Time synchronized with {server} (offset {offset} ms)")
            result = SyncResult(
                success=True,
                message=f"Time synchronized: {format_utc(self.current_time_millis())}",
                server=server,
                offset_ms=offset,
                attempts=attempts,
            )
            self.last_result = result
            return result

        reason = str(last_error) if last_error else "no server responded"
        failure = TimeSyncFailure(f"Time sync failed: {reason}", last_error)
        logger.error(f"{failure} ({len(servers)} servers tried)")
        result = SyncResult(
            success=False,
            message=str(failure),
            attempts=attempts,
            error=failure,
        )
        self.last_result = result
        return result
