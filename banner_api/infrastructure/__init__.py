"""
Infrastructure Layer
====================
설정, 저장소, DI 컨테이너

구조:
- config/: 설정 관리
- persistence/: 캐시 파일 저장소
- container.py: DI Container
"""

from banner_api.infrastructure.config.config_manager import AppConfig, ScraperSettings

__all__ = ["AppConfig", "ScraperSettings"]
