"""
Core 모듈
=========
스크래핑 실행/캐시/스케줄링 핵심 컴포넌트

모듈 구조:
- scrape_manager.py: 재시도 컨트롤러 + ScrapeStatus 소유
- banner_cache.py: 캐시 읽기 경로 (부트스트랩, 백그라운드 새로고침)
- scheduler.py: 주기적 새로고침 스케줄러
"""

from banner_api.core.banner_cache import BannerCache
from banner_api.core.scheduler import RefreshScheduler
from banner_api.core.scrape_manager import ScrapeManager

__all__ = ["BannerCache", "RefreshScheduler", "ScrapeManager"]
