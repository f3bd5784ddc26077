import os
from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

from banner_api.domain.entities.banner import RawBanner
from banner_api.infrastructure.config.config_manager import AppConfig, ScraperSettings
from banner_api.infrastructure.container import Container


def pytest_configure(config):
    """테스트 시작 전 환경 설정 로드"""
    project_root = Path(__file__).parent.parent

    env_file = os.environ.get("ENV_FILE", ".env.test")
    env_path = project_root / env_file
    if env_path.exists():
        load_dotenv(env_path, override=True)
        print(f"[conftest] Applied test overrides from: {env_path}")


# =========================================================================
# 공통 헬퍼
# =========================================================================


def _make_raw(name: str, query: str = "", **kwargs) -> RawBanner:
    """테스트용 RawBanner (https://images.dutchie.com/<name>.jpg)"""
    src = f"https://images.dutchie.com/{name}.jpg"
    if query:
        src = f"{src}?{query}"
    return RawBanner(src=src, alt=kwargs.pop("alt", name), **kwargs)


class FakeSession:
    """BrowserSession 대체 (open/close 이벤트를 공유 리스트에 기록)"""

    def __init__(self, events: list, executable_path=None, headless=True):
        self.events = events
        self.executable_path = executable_path
        self.headless = headless
        self.close_count = 0

    async def __aenter__(self):
        self.events.append("open")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close_count += 1
        self.events.append("close")

    @asynccontextmanager
    async def open_page(self, profile):
        yield MagicMock(name=f"page-{profile.name}")


class FakeSessionFactory:
    """세션 생성 횟수와 이벤트 순서 추적"""

    def __init__(self):
        self.events: list[str] = []
        self.sessions: list[FakeSession] = []

    def __call__(self, executable_path=None, headless=True):
        session = FakeSession(self.events, executable_path, headless)
        self.sessions.append(session)
        return session


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture
def fast_settings():
    """대기 시간 0인 ScraperSettings"""
    return ScraperSettings(
        initial_settle_seconds=0,
        click_settle_seconds=0,
        navigation_timeout_ms=1000,
        selector_timeout_ms=1000,
    )


@pytest.fixture
def app_config(tmp_path, fast_settings):
    """tmp_path 데이터 디렉토리를 사용하는 AppConfig"""
    return AppConfig(
        target_url="https://dutchie.com/embedded-menu/test-store",
        data_path=tmp_path / "data",
        logs_path=tmp_path / "logs",
        config_path=tmp_path / "config",
        max_retries=2,
        retry_delay_seconds=0,
        scraper=fast_settings,
    )


@pytest.fixture
def make_raw():
    """RawBanner 생성 함수"""
    return _make_raw


@pytest.fixture
def session_factory():
    return FakeSessionFactory()


@pytest.fixture
def no_sleep():
    """asyncio.sleep 대체 (호출 인자 기록)"""
    return AsyncMock()


@pytest.fixture(autouse=True)
def reset_container():
    """테스트 간 DI 컨테이너 격리"""
    Container.reset()
    yield
    Container.reset()
