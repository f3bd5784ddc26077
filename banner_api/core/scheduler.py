"""
Refresh Scheduler
=================
주기적 배너 새로고침 스케줄러

## 동작
- 시작 시 즉시 1회 스크래핑 후, 완료될 때마다 interval 뒤 다음 실행 예약
- 실패 시 정규 타이머와 별도로 짧은 간격의 재시도 타이머 예약
  (주기당 최대 max_failure_retries회, 성공 시 초기화)
- 두 타이머가 겹치면 먼저 도착한 쪽만 실행 (ScrapeManager의 is_running 가드)

## 사용 예
```python
scheduler = RefreshScheduler(manager, interval_minutes=60)
await scheduler.start()

status = scheduler.get_status()

scheduler.stop()
```
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from banner_api.core.scrape_manager import ScrapeManager
from banner_api.domain.entities.banner import ScrapeResult
from banner_api.domain.exceptions import (
    ConfigurationError,
    ScrapeError,
    ScrapeInProgressError,
)

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """정규 주기 + 실패 재시도 타이머"""

    def __init__(
        self,
        manager: ScrapeManager,
        interval_minutes: int = 60,
        failure_retry_minutes: int = 5,
        max_failure_retries: int = 3,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.manager = manager
        self.interval_minutes = interval_minutes
        self.failure_retry_minutes = failure_retry_minutes
        self.max_failure_retries = max_failure_retries
        self._sleep = sleep
        self.running: bool = False
        self._task: asyncio.Task | None = None
        self._retry_task: asyncio.Task | None = None
        self._failure_retries = 0

    async def start(self, run_immediately: bool = True):
        """스케줄러 시작"""
        if self.running:
            return
        self.running = True
        logger.info(f"Refresh scheduler started: every {self.interval_minutes} minutes")
        self._task = asyncio.create_task(self._run_loop(run_immediately))

    def stop(self):
        """스케줄러 중지"""
        self.running = False
        for task in (self._task, self._retry_task):
            if task and not task.done():
                task.cancel()
        self._task = None
        self._retry_task = None
        self.manager.status.next_scheduled = None

    async def _run_loop(self, run_immediately: bool):
        if not run_immediately:
            await self._wait_interval()
        while self.running:
            try:
                # 새 주기마다 실패 재시도 예산 초기화
                self._failure_retries = 0
                await self.run_once()
                await self._wait_interval()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Scheduler loop error: {e}")
                await self._wait_interval()

    async def _wait_interval(self):
        seconds = self.interval_minutes * 60
        self.manager.status.next_scheduled = datetime.now(timezone.utc) + timedelta(
            seconds=seconds
        )
        await self._sleep(seconds)

    async def run_once(self) -> ScrapeResult | None:
        """
        예약된 스크래핑 1회 실행

        Returns:
            성공 시 결과, 실패/건너뜀 시 None (예외를 올리지 않음)
        """
        try:
            result = await self.manager.run_with_retry()
        except ScrapeInProgressError:
            logger.info("Scheduled scrape skipped: already running")
            return None
        except ConfigurationError as e:
            logger.error(f"Scheduled scrape skipped: {e}")
            return None
        except ScrapeError as e:
            logger.error(f"Scheduled scrape failed: {e}")
            self._schedule_failure_retry()
            return None

        self._failure_retries = 0
        return result

    def _schedule_failure_retry(self):
        if not self.running:
            return
        current = self._retry_task
        # 실행 중인 재시도 자신이 다음 재시도를 예약하는 경우는 허용
        if current and not current.done() and current is not asyncio.current_task():
            return
        if self._failure_retries >= self.max_failure_retries:
            logger.warning(
                f"Failure retries exhausted ({self.max_failure_retries}), "
                "waiting for next scheduled run"
            )
            return
        self._failure_retries += 1
        self._retry_task = asyncio.create_task(self._failure_retry(self._failure_retries))

    async def _failure_retry(self, number: int):
        logger.info(
            f"Failure retry {number}/{self.max_failure_retries} "
            f"in {self.failure_retry_minutes} minutes"
        )
        try:
            await self._sleep(self.failure_retry_minutes * 60)
            if self.running:
                await self.run_once()
        finally:
            if self._retry_task is asyncio.current_task():
                self._retry_task = None

    def get_status(self) -> dict[str, Any]:
        """스케줄러 상태 반환"""
        next_scheduled = self.manager.status.next_scheduled
        return {
            "running": self.running,
            "interval_minutes": self.interval_minutes,
            "failure_retry_minutes": self.failure_retry_minutes,
            "failure_retries": self._failure_retries,
            "retry_pending": bool(self._retry_task and not self._retry_task.done()),
            "next_scheduled": next_scheduled.isoformat() if next_scheduled else None,
        }
