"""
API Middleware
==============
FastAPI 미들웨어 모듈 (요청 로깅)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """요청 로깅 미들웨어 (API Key는 전달 여부만 기록)"""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        header_key = "present" if request.headers.get("x-api-key") else "missing"
        query_key = "present" if request.query_params.get("key") else "missing"

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.0f}ms, key header: {header_key}, query key: {query_key})"
        )
        return response
