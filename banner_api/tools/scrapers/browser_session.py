"""
Browser Session
===============
Playwright 헤드리스 Chromium 세션 (스크래핑 시도 1회 단위)

- 시도 1회(데스크톱 + 모바일 패스)당 브라우저 하나를 띄우고 반드시 닫습니다.
- 패스마다 새 BrowserContext를 열어 뷰포트/User-Agent를 적용합니다.
- close()는 여러 번 호출해도 안전하며 예외를 올리지 않습니다.

## 사용 예
```python
async with BrowserSession(executable_path="/usr/bin/chromium") as session:
    async with session.open_page(DESKTOP_PROFILE) as page:
        await page.goto(url)
```
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright

from banner_api.domain.entities.viewport import ViewportProfile

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-features=TranslateUI",
]


class BrowserSession:
    """헤드리스 브라우저 세션"""

    def __init__(self, executable_path: str | None = None, headless: bool = True):
        self.executable_path = executable_path
        self.headless = headless
        self._playwright: Playwright | None = None
        self.browser: Browser | None = None
        self.closed = False

    async def start(self) -> "BrowserSession":
        """브라우저 실행"""
        self._playwright = await async_playwright().start()
        launch_kwargs = {"headless": self.headless, "args": LAUNCH_ARGS}
        if self.executable_path:
            launch_kwargs["executable_path"] = self.executable_path
        self.browser = await self._playwright.chromium.launch(**launch_kwargs)
        logger.info(f"Browser launched (executable={self.executable_path or 'bundled'})")
        return self

    async def close(self) -> None:
        """브라우저 종료 (멱등, 예외 없음)"""
        if self.closed:
            return
        self.closed = True

        browser, self.browser = self.browser, None
        playwright, self._playwright = self._playwright, None

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.error(f"Error closing browser: {e}")
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.debug(f"Playwright stop failed (무시됨): {e}")

    async def __aenter__(self) -> "BrowserSession":
        try:
            return await self.start()
        except BaseException:
            # 실행 도중 실패해도 이미 띄운 드라이버는 정리
            await self.close()
            raise

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @asynccontextmanager
    async def open_page(self, profile: ViewportProfile) -> AsyncIterator[Page]:
        """
        프로필(뷰포트/User-Agent)이 적용된 페이지 열기

        컨텍스트는 블록을 벗어나면 닫힙니다.
        """
        if self.browser is None:
            raise RuntimeError("Browser session is not started")
        context = await self.browser.new_context(**profile.context_options())
        try:
            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Context close failed (무시됨): {e}")
