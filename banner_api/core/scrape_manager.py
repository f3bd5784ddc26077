"""
Scrape Manager
==============
재시도 컨트롤러 + ScrapeStatus 소유자

플로우:
1. 대상 URL 확인 (없으면 ConfigurationError, 브라우저 실행 안 함)
2. is_running 확인 → 실행 중이면 '이미 실행 중' (중복 세션 방지)
3. 시도 루프: 최대 max_retries + 1회, 실패 사이에 retry_delay 대기
4. 성공/최종 실패를 ScrapeStatus에 기록, is_running 해제

호출자가 취소되어도(HTTP 연결 끊김 등) 진행 중인 스크래핑은 끝까지 실행됩니다.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from banner_api.domain.entities.banner import ScrapeResult
from banner_api.domain.entities.status import ScrapeStatus
from banner_api.domain.exceptions import (
    ConfigurationError,
    ScrapeError,
    ScrapeInProgressError,
)
from banner_api.infrastructure.config.config_manager import AppConfig
from banner_api.tools.scrapers.banner_scraper import BannerScraper

logger = logging.getLogger(__name__)


class ScrapeManager:
    """스크래핑 실행 관리자 (프로세스당 1개)"""

    def __init__(
        self,
        config: AppConfig,
        scraper: BannerScraper,
        status: ScrapeStatus | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.scraper = scraper
        self.status = status or ScrapeStatus()
        self._sleep = sleep
        self._inflight: asyncio.Task | None = None

    def is_running(self) -> bool:
        return self.status.is_running

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    async def scrape(self, url: str | None = None) -> ScrapeResult:
        """
        강제 새로고침 (캐시 무시)

        Raises:
            ConfigurationError: 대상 URL 미설정
            ScrapeInProgressError: 이미 실행 중
            ScrapeError: 재시도 소진 후 마지막 에러
        """
        return await self.run_with_retry(url=url)

    async def run_with_retry(
        self,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        join_running: bool = False,
        url: str | None = None,
    ) -> ScrapeResult:
        """
        재시도 포함 스크래핑 1회 (논리적 호출 단위)

        Args:
            max_retries: 재시도 횟수 (기본: config.max_retries). 총 시도 = max_retries + 1
            retry_delay: 시도 사이 대기 (초, 기본: config.retry_delay_seconds)
            join_running: True면 진행 중인 스크래핑 결과를 기다림 (부트스트랩용)
            url: 대상 URL (기본: config.target_url)
        """
        if max_retries is not None and max_retries < 0:
            raise ValueError(f"max_retries must be >= 0: {max_retries}")
        if retry_delay is not None and retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0: {retry_delay}")
        url = url or self.config.require_target_url()

        if self.status.is_running:
            if join_running and self._inflight is not None:
                logger.info("Scrape already in progress, waiting for its result")
                return await asyncio.shield(self._inflight)
            raise ScrapeInProgressError("Scrape already in progress", url=url)

        task = self._start_invocation(url, max_retries, retry_delay)
        return await asyncio.shield(task)

    def start_background(self) -> bool:
        """
        백그라운드 새로고침 시작

        Returns:
            True if started, False if already running or not configured
        """
        try:
            url = self.config.require_target_url()
        except ConfigurationError as e:
            logger.error(f"Background refresh skipped: {e}")
            return False
        if self.status.is_running:
            logger.info("Background refresh skipped: scrape already in progress")
            return False
        self._start_invocation(url, None, None)
        return True

    def _start_invocation(
        self, url: str, max_retries: int | None, retry_delay: float | None
    ) -> asyncio.Task:
        # 확인과 설정 사이에 await가 없으므로 단일 스레드 루프에서 원자적
        if self.status.is_running:
            raise ScrapeInProgressError("Scrape already in progress", url=url)
        self.status.record_start(self._now())
        task = asyncio.create_task(
            self._run_invocation(
                url,
                self.config.max_retries if max_retries is None else max_retries,
                self.config.retry_delay_seconds if retry_delay is None else retry_delay,
            )
        )
        task.add_done_callback(self._consume_result)
        self._inflight = task
        return task

    @staticmethod
    def _consume_result(task: asyncio.Task) -> None:
        # 백그라운드 실행의 예외는 이미 로깅됨. 미회수 경고만 방지
        if not task.cancelled():
            task.exception()

    async def _run_invocation(
        self, url: str, max_retries: int, retry_delay: float
    ) -> ScrapeResult:
        total_attempts = max_retries + 1
        last_error: ScrapeError | None = None
        try:
            for attempt in range(1, total_attempts + 1):
                self.status.last_attempt_count = attempt
                logger.info(f"Scrape attempt {attempt}/{total_attempts}: {url}")
                try:
                    result = await self.scraper.scrape(url)
                except ScrapeError as e:
                    e.attempt = attempt
                    last_error = e
                    logger.error(
                        f"Scrape attempt {attempt}/{total_attempts} failed "
                        f"({e.error_type}): {e}"
                    )
                    if attempt < total_attempts:
                        logger.info(f"Retrying in {retry_delay}s...")
                        await self._sleep(retry_delay)
                    continue

                self.status.record_success(self._now())
                logger.info(f"Scrape succeeded on attempt {attempt}: {result.count} banners")
                return result

            logger.error(f"Scrape failed after {total_attempts} attempts: {last_error}")
            self.status.record_failure(last_error)
            raise last_error
        except ScrapeError:
            raise
        except Exception as e:
            # ConfigurationError 등 재시도 대상이 아닌 에러
            self.status.record_failure(e)
            raise
        finally:
            self.status.is_running = False
