"""
App Factory
===========
FastAPI 앱 생성 팩토리 (미들웨어, 라우터, 예외 핸들러 등록)
"""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from banner_api.api.dependencies import limiter
from banner_api.api.middleware import RequestLoggingMiddleware
from banner_api.infrastructure.container import Container

logger = logging.getLogger(__name__)


def create_app(
    lifespan: Callable[..., Any] | None = None,
) -> FastAPI:
    """
    FastAPI 앱 생성 및 설정

    Args:
        lifespan: Optional lifespan async context manager for startup/shutdown.

    Returns:
        설정 완료된 FastAPI 인스턴스
    """
    kwargs: dict[str, Any] = {
        "title": "Dutchie Banner API",
        "description": "Dutchie 임베디드 메뉴 프로모션 배너 스크래핑 API",
        "version": "1.0.0",
    }
    if lifespan is not None:
        kwargs["lifespan"] = lifespan

    app = FastAPI(**kwargs)

    # Rate Limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # {"error", "message"} 형태 detail은 그대로 응답 본문으로
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    # CORS (읽기 전용 API)
    allowed_origins = Container.get_config().allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if "*" in allowed_origins else allowed_origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type", "X-API-Key"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    _register_routers(app)

    return app


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def _register_routers(app: FastAPI) -> None:
    """라우터 등록"""
    from banner_api.api.routes.banners import router as banners_router
    from banner_api.api.routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(banners_router)
