"""
Carousel Walker
===============
캐러셀 '다음' 버튼을 반복 클릭하여 지연 렌더링되는 슬라이드 수집

대상 페이지는 DOM에 슬라이드 몇 개만 렌더링하므로 버튼을 넘기며
새 배너를 모읍니다.

## 종료 조건 (실패가 아님)
- 최대 클릭 수 도달 (안전 상한)
- 연속 N회 클릭 동안 새 배너 없음 (stable round: 캐러셀이 한 바퀴 돌았음)
- 클릭/수집 중 Playwright 에러 (요소 분리, 페이지 이동 등) → 이미 모은 배너로 종료

모바일 뷰포트에서는 버튼 없이 모든 슬라이드를 렌더링하므로
보이지 않는 버튼은 에러가 아니라 즉시 종료 신호입니다.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from banner_api.domain.entities.banner import RawBanner
from banner_api.domain.interfaces.site_adapter import SiteAdapter
from banner_api.infrastructure.config.config_manager import ScraperSettings
from banner_api.tools.scrapers.banner_merge import BannerAccumulator

logger = logging.getLogger(__name__)

CollectFn = Callable[[Page], Awaitable[list[RawBanner]]]


class CarouselWalker:
    """캐러셀 순회기"""

    def __init__(
        self,
        adapter: SiteAdapter,
        max_clicks: int = 20,
        stable_rounds: int = 3,
        click_settle_seconds: float = 1.0,
    ):
        self.adapter = adapter
        self.max_clicks = max_clicks
        self.stable_rounds = stable_rounds
        self.click_settle_seconds = click_settle_seconds

    @classmethod
    def from_settings(cls, adapter: SiteAdapter, settings: ScraperSettings) -> "CarouselWalker":
        return cls(
            adapter,
            max_clicks=settings.max_clicks,
            stable_rounds=settings.stable_rounds,
            click_settle_seconds=settings.click_settle_seconds,
        )

    async def find_next_control(self, page: Page) -> ElementHandle | None:
        """후보 셀렉터를 순서대로 시도하여 실제로 보이는 '다음' 버튼 반환"""
        for selector in self.adapter.next_control_selectors:
            try:
                handle = await page.query_selector(selector)
            except PlaywrightError as e:
                logger.debug(f"Next-control selector failed {selector!r}: {e}")
                continue
            if handle is not None and await self.is_interactable(handle):
                logger.debug(f"Carousel next control matched {selector!r}")
                return handle
        return None

    @staticmethod
    async def is_interactable(handle: ElementHandle) -> bool:
        """보이고(style) 크기가 0이 아닌 요소인지 확인"""
        try:
            if not await handle.is_visible():
                return False
            box = await handle.bounding_box()
        except PlaywrightError:
            return False
        return bool(box) and box["width"] > 0 and box["height"] > 0

    async def walk(
        self, page: Page, collect: CollectFn, initial: list[RawBanner]
    ) -> list[RawBanner]:
        """
        캐러셀을 넘기며 새 배너 누적

        Args:
            page: 대상 페이지에 위치한 라이브 페이지
            collect: 현재 DOM 배너 수집 함수 (PageExtractor.collect)
            initial: 초기 렌더링에서 수집한 배너

        Returns:
            초기 배너 + 새로 발견한 배너 (수집 순서)
        """
        accumulator = BannerAccumulator(initial)

        control = await self.find_next_control(page)
        if control is None:
            logger.info("No carousel next button found, using initially visible banners only")
            return accumulator.items

        stable = 0
        clicks = 0
        for clicks in range(1, self.max_clicks + 1):
            try:
                await control.click()
                await asyncio.sleep(self.click_settle_seconds)
                added = accumulator.add(await collect(page))
            except PlaywrightError as e:
                logger.info(f"Carousel walk stopped at click {clicks}: {e}")
                break

            if added:
                stable = 0
                continue
            stable += 1
            if stable >= self.stable_rounds:
                break

        logger.info(f"Carousel walk done: {len(accumulator)} banners after {clicks} clicks")
        return accumulator.items
