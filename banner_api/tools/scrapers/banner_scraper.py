"""
Multi-Pass Banner Scraper
=========================
데스크톱(기준) + 모바일(보강) 2패스 배너 스크래퍼

## 시도 1회 흐름
1. 브라우저 세션 1개 실행 (블록을 벗어나면 모든 경로에서 종료)
2. 데스크톱 패스: 추출 + 캐러셀 순회 → 배너 목록/ID 결정 (0건이면 NoBannersFound)
3. 모바일 패스: 같은 세션에서 좁은 뷰포트로 재추출 (실패해도 데스크톱 데이터로 계속)
4. 서수 기준 병합 → src URL 형식 검사 (경고만)
5. ScrapeResult 생성 후 캐시 원자적 교체

재시도는 이 클래스가 아니라 ScrapeManager가 담당합니다.
"""

import logging
from typing import Callable, Optional

from banner_api.domain.entities.banner import RawBanner, ScrapeResult, is_absolute_http_url
from banner_api.domain.exceptions import (
    CacheStoreError,
    ConfigurationError,
    MobilePassFailure,
    NoBannersFound,
    ScrapeError,
)
from banner_api.domain.interfaces.site_adapter import SiteAdapter
from banner_api.infrastructure.config.config_manager import ScraperSettings
from banner_api.infrastructure.persistence.json_repository import JsonBannerRepository
from banner_api.tools.scrapers.banner_merge import merge_passes
from banner_api.tools.scrapers.browser_session import BrowserSession
from banner_api.tools.scrapers.carousel_walker import CarouselWalker
from banner_api.tools.scrapers.page_extractor import PageExtractor

logger = logging.getLogger(__name__)


class BannerScraper:
    """
    배너 스크래퍼 (시도 1회 단위)

    Args:
        adapter: 대상 사이트 어댑터
        settings: 스크래퍼 튜닝 설정
        executable_path: 브라우저 실행 파일 (None이면 Playwright 번들 Chromium)
        repository: 결과 저장소 (None이면 저장하지 않음)
        session_factory: BrowserSession 생성 함수 (테스트에서 교체)
    """

    def __init__(
        self,
        adapter: SiteAdapter,
        settings: Optional[ScraperSettings] = None,
        executable_path: Optional[str] = None,
        repository: Optional[JsonBannerRepository] = None,
        session_factory: Callable[..., BrowserSession] = BrowserSession,
    ):
        self.adapter = adapter
        self.settings = settings or ScraperSettings()
        self.executable_path = executable_path
        self.repository = repository
        self.session_factory = session_factory
        self.extractor = PageExtractor(adapter, self.settings)
        self.walker = CarouselWalker.from_settings(adapter, self.settings)

    async def scrape(self, url: str) -> ScrapeResult:
        """
        2패스 스크래핑 1회 수행 + 저장

        Raises:
            NoBannersFound: 데스크톱 패스 결과 0건
            NavigationTimeout, ContentNotFound: 데스크톱 패스 페이지 로드 실패
            ScrapeError: 그 밖의 예상치 못한 실패 (원인은 __cause__)
        """
        try:
            async with self.session_factory(
                executable_path=self.executable_path, headless=self.settings.headless
            ) as session:
                desktop = await self._desktop_pass(session, url)
                mobile = await self._mobile_pass(session, url)
            return await self._build_and_persist(url, desktop, mobile)
        except (ScrapeError, ConfigurationError):
            raise
        except Exception as e:
            raise ScrapeError(f"Unexpected scrape failure: {e}", url=url) from e

    async def _build_and_persist(
        self, url: str, desktop: list[RawBanner], mobile: Optional[list[RawBanner]]
    ) -> ScrapeResult:
        banners = merge_passes(desktop, mobile)
        for banner in banners:
            if not is_absolute_http_url(banner.src):
                logger.warning(f"Banner {banner.id} has invalid src URL: {banner.src!r}")

        result = ScrapeResult.build(banners, source=url)
        enriched = sum(1 for b in banners if b.mobile_src)
        logger.info(f"Scraped {result.count} banners ({enriched} with distinct mobile image)")

        if self.repository is not None:
            try:
                await self.repository.save(result)
            except CacheStoreError as e:
                raise ScrapeError(f"Failed to persist scrape result: {e}", url=url) from e

        return result

    async def _desktop_pass(self, session: BrowserSession, url: str) -> list[RawBanner]:
        logger.info(f"Desktop pass: {url}")
        banners = await self.extractor.extract_at_viewport(
            session, url, self.settings.desktop, walker=self.walker
        )
        if not banners:
            raise NoBannersFound("No banners found on page", url=url)
        return banners

    async def _mobile_pass(self, session: BrowserSession, url: str) -> Optional[list[RawBanner]]:
        """모바일 보강 패스 (실패 시 None, 예외를 올리지 않음)"""
        if not self.settings.mobile_pass_enabled:
            return None
        logger.info(f"Mobile pass: {url}")
        try:
            return await self.extractor.extract_at_viewport(
                session, url, self.settings.mobile, walker=self.walker
            )
        except Exception as e:
            failure = MobilePassFailure(f"Mobile pass failed: {e}", url=url)
            logger.warning(f"{failure} (continuing with desktop-only data)")
            return None
