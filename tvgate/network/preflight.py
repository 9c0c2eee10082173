"""
Preflight network guard.

The player is only licensed inside a closed network. Before anything else
runs, the guard pings a host that is only reachable from inside that
network. It retries a bounded number of times and settles exactly once:
PASSED on the first answer, FAILED when all tries are used up.
"""

import logging
import subprocess
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum
from typing import Optional

from tvgate.errors import AttemptError, PreflightFailure
from tvgate.network.worker import BackgroundWorker, Dispatcher, direct_dispatcher

logger = logging.getLogger(__name__)

TARGET_HOST = "192.168.99.1"
MAX_TRY = 10
PROBE_TIMEOUT = 2.0
RETRY_INTERVAL = 1.0

# probe(host, timeout) -> reachable
Probe = Callable[[str, float], bool]


class GuardState(str, Enum):
    """Preflight outcome; leaves PENDING exactly once."""

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


def ping_once(host: str, timeout: float, ping_path: str = "ping") -> bool:
    """Send one ICMP echo through the system ping command."""
    wait = max(1, int(round(timeout)))
    try:
        result = subprocess.run(
            [ping_path, "-c", "1", "-W", str(wait), host],
            check=False,
            capture_output=True,
            timeout=timeout + 1,
        )
    except FileNotFoundError:
        logger.error(f"Ping command not found: {ping_path}")
        return False
    except subprocess.TimeoutExpired:
        return False
    return result.returncode == 0


class NetworkPreflightGuard:
    """
    Bounded-retry reachability check gating all playback.

    Usage:
        guard = NetworkPreflightGuard(worker, dispatcher=loop_dispatcher(loop))
        guard.run(on_pass=start_playback, on_fail=show_error_and_exit)
    """

    def __init__(
        self,
        worker: BackgroundWorker,
        host: str = TARGET_HOST,
        max_tries: int = MAX_TRY,
        probe_timeout: float = PROBE_TIMEOUT,
        retry_interval: float = RETRY_INTERVAL,
        probe: Optional[Probe] = None,
        dispatcher: Dispatcher = direct_dispatcher,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_tries < 1:
            raise ValueError("max_tries must be at least 1")
        self._worker = worker
        self.host = host
        self.max_tries = max_tries
        self._probe_timeout = probe_timeout
        self._retry_interval = retry_interval
        self._probe = probe or ping_once
        self._dispatcher = dispatcher
        self._sleep = sleep

        self._lock = threading.Lock()
        self._state = GuardState.PENDING
        self._future: Optional["Future[GuardState]"] = None
        self.attempts: list[AttemptError] = []

    @property
    def state(self) -> GuardState:
        with self._lock:
            return self._state

    @property
    def passed(self) -> bool:
        return self.state is GuardState.PASSED

    def run(
        self,
        on_pass: Callable[[], None],
        on_fail: Callable[[PreflightFailure], None],
    ) -> "Future[GuardState]":
        """
        Start the check on the background worker.

        Only the first call probes; later calls get the same future and their
        callbacks fire once it settles.
        """
        with self._lock:
            if self._future is None:
                self._future = self._worker.submit(self._check)
            future = self._future

        future.add_done_callback(lambda f: self._deliver(f, on_pass, on_fail))
        return future

    def _deliver(
        self,
        future: "Future[GuardState]",
        on_pass: Callable[[], None],
        on_fail: Callable[[PreflightFailure], None],
    ) -> None:
        if future.cancelled():
            return
        if future.result() is GuardState.PASSED:
            self._dispatcher(on_pass)
        else:
            self._dispatcher(on_fail, PreflightFailure(self.host, len(self.attempts)))

    def _check(self) -> GuardState:
        for index in range(self.max_tries):
            attempt = index + 1
            try:
                reachable = self._probe(self.host, self._probe_timeout)
            except Exception as e:
                logger.warning(f"Probe {attempt}/{self.max_tries} of {self.host} raised: {e}")
                reachable = False
                message = str(e)
            else:
                message = "no reply"

            if reachable:
                logger.info(f"Network guard passed: {self.host} answered on try {attempt}")
                return self._settle(GuardState.PASSED)

            self.attempts.append(AttemptError(target=self.host, attempt=attempt, message=message))
            logger.debug(f"Probe {attempt}/{self.max_tries} of {self.host} failed")

            if index < self.max_tries - 1:
                self._sleep(self._retry_interval)

        logger.error(f"Network guard failed: {self.host} unreachable after {self.max_tries} tries")
        return self._settle(GuardState.FAILED)

    def _settle(self, state: GuardState) -> GuardState:
        with self._lock:
            if self._state is GuardState.PENDING:
                self._state = state
            return self._state
