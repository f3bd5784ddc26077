"""
Banner Cache
============
캐시 읽기 경로 (API 소비자용)

- 캐시 없음: 동기 부트스트랩 스크래핑 (진행 중이면 그 결과를 기다림)
- 캐시 오래됨: 기존 데이터를 즉시 반환하고 백그라운드 새로고침 1회 시작
- 그 외: 캐시 그대로 반환

읽기 경로는 ScrapeStatus를 변경하지 않습니다. 새로고침 여부 판단은
ScrapeManager.start_background()에 위임합니다.
"""

import logging

from banner_api.core.scrape_manager import ScrapeManager
from banner_api.domain.entities.banner import ScrapeResult
from banner_api.infrastructure.persistence.json_repository import JsonBannerRepository

logger = logging.getLogger(__name__)


class BannerCache:
    """최선의 가용 데이터 제공"""

    def __init__(
        self,
        repository: JsonBannerRepository,
        manager: ScrapeManager,
        staleness_threshold_seconds: float,
    ):
        self.repository = repository
        self.manager = manager
        self.staleness_threshold_seconds = staleness_threshold_seconds

    async def get_cached(self) -> ScrapeResult:
        """
        캐시된 배너 반환

        Raises:
            ConfigurationError: 캐시가 없고 대상 URL도 없음
            ScrapeError: 캐시가 없고 부트스트랩 스크래핑 실패
            CacheStoreError: 캐시 파일 읽기 실패
        """
        cached = await self.repository.load()
        if cached is None:
            logger.info("No cached banners, running bootstrap scrape")
            return await self.manager.run_with_retry(join_running=True)

        age = cached.age_seconds()
        if age > self.staleness_threshold_seconds:
            if self.manager.start_background():
                logger.info(
                    f"Cached banners are stale ({age / 60:.0f} min old), "
                    "refreshing in background"
                )
        return cached

    async def get_age_seconds(self) -> float | None:
        """캐시 경과 시간 (캐시 없으면 None). 스크래핑을 유발하지 않음"""
        cached = await self.repository.load()
        return cached.age_seconds() if cached else None
