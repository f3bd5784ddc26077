"""
Banner Routes
=============
배너 조회/새로고침/상태 엔드포인트 (API Key 필요)

- GET /api/banners: 캐시된 배너 (없으면 부트스트랩, 오래되면 백그라운드 새로고침)
- GET /api/banners/refresh: 강제 새로고침 (진행 중이면 409)
- GET /api/banners/status: 스크래핑 상태 + 캐시 경과 시간
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from banner_api.api.dependencies import limiter, verify_api_key
from banner_api.domain.exceptions import (
    CacheStoreError,
    ConfigurationError,
    ScrapeError,
    ScrapeInProgressError,
)
from banner_api.infrastructure.container import Container

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/banners", tags=["Banners"], dependencies=[Depends(verify_api_key)]
)


def _error(status_code: int, error: str, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": error, "message": str(exc), **extra}
    )


@router.get("")
@limiter.limit("60/minute")
async def get_banners(request: Request):
    """
    캐시된 배너 조회

    Returns:
        ScrapeResult (banners, scrapedAt, source, count)
    """
    cache = Container.get_banner_cache()
    try:
        result = await cache.get_cached()
    except ConfigurationError as e:
        return _error(503, "Not configured", e)
    except (ScrapeError, CacheStoreError) as e:
        logger.error(f"Failed to get banners: {e}")
        return _error(500, "Failed to get banners", e)
    return result.to_json_dict()


@router.get("/refresh")
@limiter.limit("5/minute")
async def refresh_banners(request: Request):
    """
    강제 새로고침 (캐시 무시)

    진행 중인 스크래핑이 있으면 새 브라우저를 띄우지 않고 409를 반환합니다.
    """
    manager = Container.get_scrape_manager()
    try:
        result = await manager.scrape()
    except ConfigurationError as e:
        return _error(503, "Not configured", e)
    except ScrapeInProgressError as e:
        return _error(409, "Scrape already in progress", e, status=manager.status.to_dict())
    except ScrapeError as e:
        return _error(500, "Scrape failed", e)
    return result.to_json_dict()


@router.get("/status")
@limiter.limit("30/minute")
async def get_status(request: Request):
    """스크래핑 상태 + 캐시 정보 (스크래핑을 유발하지 않음)"""
    manager = Container.get_scrape_manager()
    cache = Container.get_banner_cache()
    try:
        age = await cache.get_age_seconds()
    except CacheStoreError as e:
        logger.warning(f"Cache age unavailable: {e}")
        age = None
    return {
        **manager.status.to_dict(),
        "cacheAgeSeconds": age,
        "stalenessThresholdSeconds": cache.staleness_threshold_seconds,
    }
