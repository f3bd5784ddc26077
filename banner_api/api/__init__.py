"""
API Package
===========
FastAPI 서버 모듈

구조:
- routes/health.py: 헬스체크 (/health)
- routes/banners.py: 배너 API (/api/banners, /api/banners/refresh, /api/banners/status)
- dependencies.py: 공통 의존성 (인증, 레이트리밋)
- middleware.py: 요청 로깅
- app_factory.py: 앱 생성
- server.py: lifespan + ASGI 앱
"""
