"""
Health Check Routes
===================
헬스체크 엔드포인트 (/health, 인증 없음)
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from banner_api.api.dependencies import limiter

router = APIRouter(tags=["Health"])


@router.get("/health")
@limiter.limit("60/minute")
async def health(request: Request):
    """헬스 체크"""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
