from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from reminder_engine.services.scheduler_service import SchedulerService


def test_next_run_follows_cron() -> None:
    base = datetime(2026, 3, 10, 12, 3, tzinfo=timezone.utc)

    assert SchedulerService.next_run("*/5 * * * *", base) == datetime(2026, 3, 10, 12, 5, tzinfo=timezone.utc)
    assert SchedulerService.next_run("0 */6 * * *", base) == datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)


def test_invalid_cron_rejected() -> None:
    scheduler = SchedulerService()

    with pytest.raises(ValueError):
        scheduler.add_job("fill", "every six hours", lambda: None)


def test_disabled_scheduler_does_not_start() -> None:
    async def job():
        return None

    scheduler = SchedulerService(enabled=False)
    scheduler.add_job("dispatch", "*/5 * * * *", job)

    asyncio.run(scheduler.start())

    assert not scheduler.is_running


def test_start_and_stop() -> None:
    async def job():
        return None

    async def scenario():
        scheduler = SchedulerService()
        scheduler.add_job("dispatch", "*/5 * * * *", job)
        await scheduler.start()
        running = scheduler.is_running
        await scheduler.stop()
        return running, scheduler.is_running

    assert asyncio.run(scenario()) == (True, False)
