"""Background task scheduling."""

from tvgate.tasks.scheduler import ScheduledTask, TaskScheduler

__all__ = ["ScheduledTask", "TaskScheduler"]
