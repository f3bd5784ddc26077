"""
Domain Layer
============
배너 스크래핑 도메인 모델

구조:
- entities/: 핵심 엔티티 (Banner, ScrapeResult, ScrapeStatus, ViewportProfile)
- interfaces/: 사이트 어댑터 Protocol
- exceptions.py: 예외 계층

원칙:
- 외부 의존성 최소화 (Playwright, FastAPI 등 금지, pydantic만 허용)
"""

from banner_api.domain.entities.banner import Banner, RawBanner, ScrapeResult
from banner_api.domain.entities.status import ScrapeStatus
from banner_api.domain.entities.viewport import ViewportProfile

__all__ = ["Banner", "RawBanner", "ScrapeResult", "ScrapeStatus", "ViewportProfile"]
