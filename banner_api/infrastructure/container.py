"""
Component Container
===================
설정 → 저장소 → 스크래퍼 → ScrapeManager → 캐시/스케줄러 순으로
프로세스당 하나씩 지연 생성합니다. API 라우트와 CLI가 같은 ScrapeManager를
공유해야 is_running 가드가 유효합니다.

사용 예:
    from banner_api.infrastructure.container import Container

    # 컴포넌트 획득
    cache = Container.get_banner_cache()
    manager = Container.get_scrape_manager()

    # 테스트에서 교체
    Container.override('scrape_manager', mock_manager)

    Container.reset()
"""

from contextlib import contextmanager
from typing import Any

from banner_api.core.banner_cache import BannerCache
from banner_api.core.scheduler import RefreshScheduler
from banner_api.core.scrape_manager import ScrapeManager
from banner_api.infrastructure.config.config_manager import AppConfig
from banner_api.infrastructure.persistence.json_repository import JsonBannerRepository
from banner_api.tools.scrapers.banner_scraper import BannerScraper
from banner_api.tools.scrapers.site_adapters import get_site_adapter

_MISSING = object()


class Container:
    """
    Dependency Injection Container

    싱글톤 컴포넌트 (프로세스당 1개):
    - AppConfig
    - JsonBannerRepository
    - BannerScraper
    - ScrapeManager (ScrapeStatus 소유)
    - BannerCache
    - RefreshScheduler
    """

    _instances: dict[str, Any] = {}
    _overrides: dict[str, Any] = {}

    @classmethod
    def _get(cls, name: str, factory):
        if name in cls._overrides:
            return cls._overrides[name]
        if name not in cls._instances:
            cls._instances[name] = factory()
        return cls._instances[name]

    @classmethod
    def get_config(cls) -> AppConfig:
        """환경변수 기반 AppConfig 싱글톤"""
        return cls._get("config", AppConfig.from_env)

    @classmethod
    def get_repository(cls) -> JsonBannerRepository:
        return cls._get("repository", lambda: JsonBannerRepository(cls.get_config().cache_file))

    @classmethod
    def get_site_adapter(cls):
        return cls._get("site_adapter", lambda: get_site_adapter(cls.get_config().site_adapter))

    @classmethod
    def get_scraper(cls) -> BannerScraper:
        """
        BannerScraper 싱글톤 반환

        Returns:
            설정/어댑터/저장소가 주입된 BannerScraper
        """

        def factory():
            config = cls.get_config()
            return BannerScraper(
                adapter=cls.get_site_adapter(),
                settings=config.scraper,
                executable_path=config.browser_executable_path,
                repository=cls.get_repository(),
            )

        return cls._get("scraper", factory)

    @classmethod
    def get_scrape_manager(cls) -> ScrapeManager:
        return cls._get(
            "scrape_manager", lambda: ScrapeManager(cls.get_config(), cls.get_scraper())
        )

    @classmethod
    def get_banner_cache(cls) -> BannerCache:
        def factory():
            return BannerCache(
                repository=cls.get_repository(),
                manager=cls.get_scrape_manager(),
                staleness_threshold_seconds=cls.get_config().staleness_threshold_seconds,
            )

        return cls._get("banner_cache", factory)

    @classmethod
    def get_scheduler(cls) -> RefreshScheduler:
        def factory():
            config = cls.get_config()
            return RefreshScheduler(
                cls.get_scrape_manager(),
                interval_minutes=config.scrape_interval_minutes,
                failure_retry_minutes=config.failure_retry_minutes,
                max_failure_retries=config.max_retries,
            )

        return cls._get("scheduler", factory)

    # ----- 테스트 지원 -----

    @classmethod
    def override(cls, name: str, instance: Any) -> None:
        """이름에 해당하는 컴포넌트를 주어진 객체로 고정 (예: 'scrape_manager')"""
        cls._overrides[name] = instance

    @classmethod
    def reset(cls) -> None:
        """캐시된 싱글톤과 오버라이드 모두 제거"""
        cls._instances.clear()
        cls._overrides.clear()

    @classmethod
    @contextmanager
    def test_override(cls, name: str, instance: Any):
        """블록 안에서만 오버라이드하고 나올 때 이전 상태 복원"""
        saved = {
            registry_name: registry.pop(name, _MISSING)
            for registry_name, registry in (
                ("overrides", cls._overrides),
                ("instances", cls._instances),
            )
        }
        cls._overrides[name] = instance
        try:
            yield instance
        finally:
            cls._overrides.pop(name, None)
            if saved["overrides"] is not _MISSING:
                cls._overrides[name] = saved["overrides"]
            if saved["instances"] is not _MISSING:
                cls._instances[name] = saved["instances"]
