"""
API Dependencies
================
공통 의존성 모듈 (API Key 인증, 레이트리밋)

API Key는 X-API-Key 헤더 또는 ?key= 쿼리 파라미터로 전달합니다.
(WordPress 위젯처럼 헤더를 붙일 수 없는 임베드 환경 지원)
API_KEY 미설정 시 인증을 건너뜁니다.
"""

import hmac
import logging

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader, APIKeyQuery
from slowapi import Limiter
from slowapi.util import get_remote_address

from banner_api.infrastructure.container import Container

logger = logging.getLogger(__name__)

# ============= API Key 인증 =============

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_query = APIKeyQuery(name="key", auto_error=False)


async def verify_api_key(
    header_key: str | None = Security(api_key_header),
    query_key: str | None = Security(api_key_query),
) -> str | None:
    """API Key 검증 (헤더 우선, 없으면 쿼리)"""
    expected = Container.get_config().api_key
    if not expected:
        return None

    supplied = header_key or query_key
    if not supplied:
        raise HTTPException(
            status_code=401,
            detail={
                "error": "Unauthorized",
                "message": "API key required. Provide via X-API-Key header or ?key= parameter",
            },
        )
    if not hmac.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=403,
            detail={"error": "Forbidden", "message": "Invalid API key"},
        )
    return supplied


# ============= Rate Limiter =============

limiter = Limiter(key_func=get_remote_address)
