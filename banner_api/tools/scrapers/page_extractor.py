"""
Page Extractor
==============
한 가지 뷰포트/User-Agent 조합으로 대상 페이지를 열고 배너 원본 레코드를 추출

## 처리 순서
1. 프로필(뷰포트/User-Agent) 적용된 페이지 열기
2. 폰트/스타일시트 요청 차단 (이미지/스크립트/문서는 통과)
3. 페이지 이동 후 네트워크 안정화 대기 → 실패 시 NavigationTimeout
4. 배너 마커 셀렉터 대기 → 실패 시 ContentNotFound
5. 클라이언트 렌더링 마무리용 고정 대기 (settle)
6. 보이는 배너 이미지 수집 + 쿼리 제거 URL 기준 중복 제거
7. (선택) CarouselWalker로 나머지 슬라이드 수집
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from playwright.async_api import Page, Route
from playwright.async_api import TimeoutError as PlaywrightTimeout
from pydantic import ValidationError

from banner_api.domain.entities.banner import RawBanner
from banner_api.domain.entities.viewport import ViewportProfile
from banner_api.domain.exceptions import ContentNotFound, NavigationTimeout
from banner_api.domain.interfaces.site_adapter import SiteAdapter
from banner_api.infrastructure.config.config_manager import ScraperSettings
from banner_api.tools.scrapers.banner_merge import dedupe_by_base_url

if TYPE_CHECKING:
    from banner_api.tools.scrapers.browser_session import BrowserSession
    from banner_api.tools.scrapers.carousel_walker import CarouselWalker

logger = logging.getLogger(__name__)

# 이미지 목록과 링크 셀렉터를 받아 원본 레코드 배열 반환
COLLECT_SCRIPT = """
(images, linkSelector) => images.map(img => {
    const link = img.closest(linkSelector);
    return {
        src: img.src || '',
        srcset: img.srcset || null,
        alt: img.alt || '',
        link: link ? link.href : null,
        width: img.naturalWidth || img.width || null,
        height: img.naturalHeight || img.height || null
    };
})
"""


class PageExtractor:
    """뷰포트 단위 배너 추출기"""

    def __init__(self, adapter: SiteAdapter, settings: ScraperSettings | None = None):
        self.adapter = adapter
        self.settings = settings or ScraperSettings()

    async def extract_at_viewport(
        self,
        session: "BrowserSession",
        url: str,
        profile: ViewportProfile,
        walker: "CarouselWalker | None" = None,
    ) -> list[RawBanner]:
        """
        프로필 하나로 페이지를 열어 배너 추출

        Args:
            session: 실행 중인 브라우저 세션
            url: 대상 페이지 URL
            profile: 뷰포트/User-Agent 프로필
            walker: 지정 시 캐러셀을 넘기며 추가 슬라이드 수집

        Returns:
            수집 순서대로 정렬된 RawBanner 목록 (패스 내 중복 제거됨)

        Raises:
            NavigationTimeout: 페이지 로드 타임아웃
            ContentNotFound: 배너 마커가 나타나지 않음
        """
        async with session.open_page(profile) as page:
            if self.settings.block_resources:
                await self.install_resource_filter(page)

            await self.load(page, url)
            banners = await self.collect(page)
            logger.info(f"[{profile.name}] {len(banners)} banners visible after load")

            if walker is not None:
                banners = await walker.walk(page, self.collect, banners)

            logger.info(f"[{profile.name}] pass collected {len(banners)} banners")
            return banners

    async def install_resource_filter(self, page: Page) -> None:
        """폰트/스타일시트 등 불필요한 리소스 차단"""
        await page.route("**/*", self._route_request)

    async def _route_request(self, route: Route) -> None:
        if route.request.resource_type in self.adapter.blocked_resource_types:
            await route.abort()
        else:
            await route.continue_()

    async def load(self, page: Page, url: str) -> None:
        """페이지 이동 + 마커 대기 + settle"""
        try:
            await page.goto(
                url, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms
            )
        except PlaywrightTimeout as e:
            raise NavigationTimeout(
                f"Navigation timed out after {self.settings.navigation_timeout_ms}ms: {url}",
                url=url,
            ) from e

        try:
            await page.wait_for_selector(
                self.adapter.image_selector, timeout=self.settings.selector_timeout_ms
            )
        except PlaywrightTimeout as e:
            raise ContentNotFound(
                f"Banner marker {self.adapter.image_selector!r} not found "
                f"within {self.settings.selector_timeout_ms}ms",
                url=url,
            ) from e

        await asyncio.sleep(self.settings.initial_settle_seconds)

    async def collect(self, page: Page) -> list[RawBanner]:
        """현재 DOM에 있는 배너 이미지 수집 (쿼리 제거 URL 기준 중복 제거)"""
        raw_items = await page.eval_on_selector_all(
            self.adapter.image_selector, COLLECT_SCRIPT, self.adapter.link_selector
        )
        records = []
        for item in raw_items or []:
            try:
                records.append(RawBanner.model_validate(item))
            except ValidationError as e:
                logger.debug(f"Skipping malformed image record {item!r}: {e}")
        return dedupe_by_base_url(records)
