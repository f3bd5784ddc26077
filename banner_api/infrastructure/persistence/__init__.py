"""
Persistence Layer
=================
- JsonBannerRepository: 로컬 JSON 파일 캐시 (원자적 교체)
"""

from banner_api.infrastructure.persistence.json_repository import JsonBannerRepository

__all__ = ["JsonBannerRepository"]
