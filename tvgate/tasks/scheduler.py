"""
Interval scheduler for background upkeep such as periodic time resync.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    """A task run every ``interval_seconds``."""

    name: str
    func: Callable
    interval_seconds: float
    args: tuple = field(default_factory=tuple)

    # State, on the monotonic clock
    last_run: Optional[float] = None
    next_run: float = 0.0
    run_count: int = 0
    is_running: bool = False


class TaskScheduler:
    """
    Runs interval tasks on the event loop.

    Sync and async callables are both accepted. A failing task is logged and
    rescheduled; it never stops the scheduler. Stopping cancels runs that are
    still in flight.
    """

    def __init__(self, tick_seconds: float = 1.0):
        self._tasks: Dict[str, ScheduledTask] = {}
        self._tick = tick_seconds
        self._running = False
        self._loop_task: Optional[asyncio.Task] = None
        self._active: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._running

    def add_task(
        self,
        name: str,
        func: Callable,
        interval_seconds: float,
        *args: Any,
        run_immediately: bool = False,
    ) -> None:
        task = ScheduledTask(name=name, func=func, interval_seconds=interval_seconds, args=args)
        task.next_run = time.monotonic() + (0 if run_immediately else interval_seconds)
        self._tasks[name] = task
        logger.info(f"Scheduled task added: {name} (every {interval_seconds}s)")

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._loop_task = asyncio.create_task(self._scheduler_loop())
        logger.info("Task scheduler started")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        pending = [t for t in (self._loop_task, *self._active) if t is not None]
        for t in pending:
            t.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._loop_task = None
        self._active.clear()
        logger.info("Task scheduler stopped")

    async def _scheduler_loop(self) -> None:
        while self._running:
            now = time.monotonic()
            for task in list(self._tasks.values()):
                if task.next_run <= now and not task.is_running:
                    run = asyncio.create_task(self._execute_task(task))
                    self._active.add(run)
                    run.add_done_callback(self._active.discard)
            await asyncio.sleep(self._tick)

    async def _execute_task(self, task: ScheduledTask) -> None:
        task.is_running = True
        task.last_run = time.monotonic()
        try:
            logger.debug(f"Running scheduled task: {task.name}")
            result = task.func(*task.args)
            if asyncio.iscoroutine(result):
                await result
            task.run_count += 1
        except Exception as e:
            logger.error(f"Scheduled task failed: {task.name}: {e}")
        finally:
            task.is_running = False
            task.next_run = task.last_run + task.interval_seconds
