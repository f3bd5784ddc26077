"""
RefreshScheduler 테스트
=======================
정규 주기 실행, 실패 재시도 타이머 예산, 시작/중지
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from banner_api.core.scheduler import RefreshScheduler
from banner_api.domain.entities.status import ScrapeStatus
from banner_api.domain.exceptions import (
    ConfigurationError,
    NavigationTimeout,
    ScrapeInProgressError,
)


@pytest.fixture
def manager():
    manager = MagicMock()
    manager.status = ScrapeStatus()
    manager.run_with_retry = AsyncMock(return_value=MagicMock(count=3))
    return manager


@pytest.fixture
def scheduler(manager, no_sleep):
    return RefreshScheduler(
        manager,
        interval_minutes=60,
        failure_retry_minutes=5,
        max_failure_retries=3,
        sleep=no_sleep,
    )


async def _drain_retries(scheduler):
    while scheduler._retry_task is not None:
        await scheduler._retry_task


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_success(self, scheduler, manager):
        result = await scheduler.run_once()
        assert result.count == 3
        manager.run_with_retry.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_in_progress_skipped(self, scheduler, manager):
        scheduler.running = True
        manager.run_with_retry = AsyncMock(side_effect=ScrapeInProgressError("busy"))

        assert await scheduler.run_once() is None
        assert scheduler._retry_task is None

    @pytest.mark.asyncio
    async def test_configuration_error_skipped(self, scheduler, manager):
        scheduler.running = True
        manager.run_with_retry = AsyncMock(side_effect=ConfigurationError("no url"))

        assert await scheduler.run_once() is None
        assert scheduler._retry_task is None

    @pytest.mark.asyncio
    async def test_failure_retries_are_bounded(self, scheduler, manager, no_sleep):
        scheduler.running = True
        manager.run_with_retry = AsyncMock(side_effect=NavigationTimeout("timeout"))

        assert await scheduler.run_once() is None
        assert scheduler._retry_task is not None
        await _drain_retries(scheduler)

        # 정규 실행 1회 + 실패 재시도 3회
        assert manager.run_with_retry.await_count == 4
        assert no_sleep.await_count == 3
        no_sleep.assert_awaited_with(300)
        assert scheduler.get_status()["failure_retries"] == 3

    @pytest.mark.asyncio
    async def test_success_resets_failure_budget(self, scheduler, manager):
        scheduler.running = True
        manager.run_with_retry = AsyncMock(
            side_effect=[NavigationTimeout("timeout"), MagicMock(count=1)]
        )

        await scheduler.run_once()
        await _drain_retries(scheduler)

        assert manager.run_with_retry.await_count == 2
        assert scheduler._failure_retries == 0

    @pytest.mark.asyncio
    async def test_stop_cancels_running_failure_retry(self, scheduler, manager):
        scheduler.running = True
        retry_started = asyncio.Event()
        calls = []

        async def scrape():
            calls.append(1)
            if len(calls) == 1:
                raise NavigationTimeout("timeout")
            retry_started.set()
            await asyncio.Event().wait()

        manager.run_with_retry = AsyncMock(side_effect=scrape)

        await scheduler.run_once()
        await asyncio.wait_for(retry_started.wait(), timeout=1)

        retry = scheduler._retry_task
        assert retry is not None
        assert scheduler.get_status()["retry_pending"] is True

        scheduler.stop()
        with pytest.raises(asyncio.CancelledError):
            await retry
        assert scheduler.get_status()["retry_pending"] is False

    @pytest.mark.asyncio
    async def test_no_retry_when_stopped(self, scheduler, manager):
        manager.run_with_retry = AsyncMock(side_effect=NavigationTimeout("timeout"))

        await scheduler.run_once()

        assert scheduler._retry_task is None
        manager.run_with_retry.assert_awaited_once()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_runs_immediately_then_waits(self, manager):
        sleeping = asyncio.Event()

        async def block(seconds):
            sleeping.set()
            await asyncio.Event().wait()

        sleep = AsyncMock(side_effect=block)
        scheduler = RefreshScheduler(manager, interval_minutes=60, sleep=sleep)

        await scheduler.start()
        await asyncio.wait_for(sleeping.wait(), timeout=1)

        manager.run_with_retry.assert_awaited_once()
        sleep.assert_awaited_once_with(3600)
        next_scheduled = manager.status.next_scheduled
        remaining = (next_scheduled - datetime.now(timezone.utc)).total_seconds()
        assert 3500 < remaining <= 3600

        status = scheduler.get_status()
        assert status["running"] is True
        assert status["next_scheduled"] == next_scheduled.isoformat()

        task = scheduler._task
        scheduler.stop()
        await task

        assert scheduler.running is False
        assert manager.status.next_scheduled is None
        assert scheduler.get_status()["next_scheduled"] is None

    @pytest.mark.asyncio
    async def test_start_without_immediate_run(self, manager):
        sleeping = asyncio.Event()

        async def block(seconds):
            sleeping.set()
            await asyncio.Event().wait()

        scheduler = RefreshScheduler(manager, sleep=AsyncMock(side_effect=block))

        await scheduler.start(run_immediately=False)
        await asyncio.wait_for(sleeping.wait(), timeout=1)

        manager.run_with_retry.assert_not_awaited()
        task = scheduler._task
        scheduler.stop()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, manager):
        async def block(seconds):
            await asyncio.Event().wait()

        scheduler = RefreshScheduler(manager, sleep=block)
        await scheduler.start()
        first_task = scheduler._task
        await scheduler.start()

        assert scheduler._task is first_task
        scheduler.stop()

    def test_status_when_idle(self, scheduler):
        status = scheduler.get_status()
        assert status == {
            "running": False,
            "interval_minutes": 60,
            "failure_retry_minutes": 5,
            "failure_retries": 0,
            "retry_pending": False,
            "next_scheduled": None,
        }
