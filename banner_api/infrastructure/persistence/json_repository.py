"""
JSON File Repository Implementation
===================================
마지막 성공 스크래핑 결과(ScrapeResult) 단일 레코드 저장소

- 쓰기: 같은 디렉토리의 임시 파일에 쓴 후 os.replace로 교체 (crash-safe)
- 읽기: 파일이 없거나 손상되었으면 None (부트스트랩 스크래핑 대상)

파일 I/O는 asyncio.to_thread로 이벤트 루프를 막지 않습니다.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from banner_api.domain.entities.banner import ScrapeResult
from banner_api.domain.exceptions import CacheStoreError

logger = logging.getLogger(__name__)


def _read_json(path):
    """동기 JSON 읽기 (to_thread에서 사용)"""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(path: Path, data) -> None:
    """동기 원자적 JSON 쓰기 (to_thread에서 사용)"""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=str(path.parent), delete=False, suffix=".tmp", encoding="utf-8"
        ) as f:
            temp_path = f.name
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)  # 원자적 교체
    except BaseException:
        if temp_path and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.debug(f"임시 파일 정리 실패 (무시됨): {e}")
        raise


class JsonBannerRepository:
    """
    JSON 파일 기반 배너 캐시 저장소

    Attributes:
        path: 캐시 파일 경로 (기본: <data_dir>/banners.json)
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def load(self) -> ScrapeResult | None:
        """
        캐시 레코드 로드

        Returns:
            저장된 ScrapeResult. 파일이 없거나 손상되었으면 None
        """
        if not self.path.exists():
            return None
        try:
            data = await asyncio.to_thread(_read_json, self.path)
            return ScrapeResult.model_validate(data)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.warning(f"Corrupted banner cache {self.path}: {e}")
            return None
        except OSError as e:
            raise CacheStoreError(f"Failed to read banner cache: {e}", path=str(self.path)) from e

    async def save(self, result: ScrapeResult) -> None:
        """
        캐시 레코드 원자적 교체

        Raises:
            CacheStoreError: 쓰기 실패 시 (기존 파일은 그대로 유지)
        """
        try:
            await asyncio.to_thread(_write_json_atomic, self.path, result.to_json_dict())
        except OSError as e:
            raise CacheStoreError(f"Failed to write banner cache: {e}", path=str(self.path)) from e
        logger.info(f"Banner cache saved to {self.path} ({result.count} banners)")

    def exists(self) -> bool:
        return self.path.exists()
