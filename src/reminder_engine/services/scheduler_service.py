"""
Scheduler Service

Background asyncio tasks that run the filler and dispatcher jobs on
their cron cadences. Each tick is an independent run; overlapping runs
(e.g. with an external trigger) are safe by construction of the jobs.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from croniter import croniter

logger = logging.getLogger("reminders.services.scheduler")

JobFunc = Callable[[], Awaitable[object]]


class SchedulerService:
    """
    Periodic job runner.

    Usage:
        scheduler = SchedulerService()
        scheduler.add_job("fill", "0 */6 * * *", filler.fill)
        await scheduler.start()
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._jobs: Dict[str, tuple] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._running = False

    def add_job(self, name: str, cron_expression: str, func: JobFunc):
        """Register a job; cron_expression is validated immediately"""
        if not croniter.is_valid(cron_expression):
            raise ValueError(f"Invalid cron expression for job '{name}': {cron_expression}")
        self._jobs[name] = (cron_expression, func)

    async def start(self):
        """Start one background task per registered job"""
        if not self.enabled:
            logger.info("Scheduler is disabled (SCHEDULER_ENABLED=false)")
            return

        if self._running:
            logger.warning("Scheduler is already running")
            return

        self._running = True
        for name, (cron_expression, func) in self._jobs.items():
            self._tasks[name] = asyncio.create_task(self._job_loop(name, cron_expression, func))
            logger.info(f"Scheduled job '{name}' ({cron_expression})")

    async def stop(self):
        """Stop all background tasks"""
        self._running = False
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
        for task in self._tasks.values():
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks.clear()
        logger.info("Scheduler stopped")

    @staticmethod
    def next_run(cron_expression: str, base_time: Optional[datetime] = None) -> datetime:
        """Next fire time of a cron expression after base_time"""
        base = base_time or datetime.now(timezone.utc)
        return croniter(cron_expression, base).get_next(datetime)

    async def _job_loop(self, name: str, cron_expression: str, func: JobFunc):
        """Sleep until the next cron tick, run the job, repeat"""
        while self._running:
            now = datetime.now(timezone.utc)
            delay = (self.next_run(cron_expression, now) - now).total_seconds()
            try:
                await asyncio.sleep(max(delay, 0))
            except asyncio.CancelledError:
                break

            try:
                await func()
            except Exception as e:
                logger.error(f"Scheduled job '{name}' failed: {e}")

    @property
    def is_running(self) -> bool:
        return self._running
