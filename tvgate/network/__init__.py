"""Network preflight and the background worker."""

from tvgate.network.preflight import GuardState, NetworkPreflightGuard, ping_once
from tvgate.network.worker import (
    BackgroundWorker,
    Dispatcher,
    direct_dispatcher,
    loop_dispatcher,
)

__all__ = [
    "BackgroundWorker",
    "Dispatcher",
    "GuardState",
    "NetworkPreflightGuard",
    "direct_dispatcher",
    "loop_dispatcher",
    "ping_once",
]
