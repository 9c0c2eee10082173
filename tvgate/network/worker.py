"""
Background worker for blocking network calls.

NTP exchanges and ping probes run on one long-lived thread so the event loop
never waits on I/O. Results are handed back through a dispatcher, which
decides where callbacks run.
"""

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# dispatch(callback, *args) -> None
Dispatcher = Callable[..., None]


def direct_dispatcher(callback: Callable[..., Any], *args: Any) -> None:
    """Run the callback on the calling thread."""
    callback(*args)


def loop_dispatcher(loop: asyncio.AbstractEventLoop) -> Dispatcher:
    """Build a dispatcher that marshals callbacks onto ``loop``."""

    def dispatch(callback: Callable[..., Any], *args: Any) -> None:
        if loop.is_closed():
            logger.debug(f"Dropping callback {callback!r}: event loop closed")
            return
        loop.call_soon_threadsafe(callback, *args)

    return dispatch


class BackgroundWorker:
    """Single-thread executor shared by the time sync engine and the guard."""

    def __init__(self, name: str = "tvgate-net"):
        self._name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._closed = False

    def submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]":
        if self._closed:
            raise RuntimeError(f"Worker {self._name} is shut down")
        return self._executor.submit(fn, *args)

    def shutdown(self, wait: bool = False) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        logger.debug(f"Worker {self._name} shut down")

    @property
    def closed(self) -> bool:
        return self._closed
