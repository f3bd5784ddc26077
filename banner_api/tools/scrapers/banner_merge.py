"""
Banner Merge
============
배너 중복 제거 및 패스 간 병합

- 패스 내부: 쿼리 제거 URL 기준 중복 제거 (DOM 노드 재활용으로 생긴 중복)
- 패스 간: 서수(index) 기준 병합. 데스크톱 목록이 ID와 순서를 결정하고
  모바일 패스는 같은 위치의 배너를 보강만 합니다.
"""

import logging
from typing import Iterable, Optional

from banner_api.domain.entities.banner import Banner, RawBanner

logger = logging.getLogger(__name__)


def dedupe_by_base_url(records: Iterable[RawBanner]) -> list[RawBanner]:
    """쿼리 제거 URL 기준 첫 등장만 남김 (순서 유지, src 없는 레코드 제외)"""
    accumulator = BannerAccumulator()
    accumulator.add(records)
    return accumulator.items


class BannerAccumulator:
    """수집 순서를 유지하며 새 배너만 누적"""

    def __init__(self, initial: Optional[Iterable[RawBanner]] = None):
        self._seen: set[str] = set()
        self.items: list[RawBanner] = []
        if initial:
            self.add(initial)

    def add(self, records: Iterable[RawBanner]) -> int:
        """
        새 배너 추가

        Returns:
            새로 추가된 배너 수
        """
        added = 0
        for record in records:
            key = record.base_url
            if not key or key in self._seen:
                continue
            self._seen.add(key)
            self.items.append(record)
            added += 1
        return added

    def __len__(self) -> int:
        return len(self.items)


def merge_passes(desktop: list[RawBanner], mobile: Optional[list[RawBanner]]) -> list[Banner]:
    """
    데스크톱/모바일 패스 결과를 서수 기준으로 병합

    Args:
        desktop: 데스크톱(기준) 패스 결과. ID는 이 순서로 부여
        mobile: 모바일 패스 결과. None이면 모든 모바일 필드 null

    Returns:
        Banner 목록 (len == len(desktop))
    """
    banners = [Banner.from_raw(i, raw) for i, raw in enumerate(desktop)]
    if not mobile:
        return banners

    if len(mobile) != len(desktop):
        logger.info(
            f"Mobile pass count differs: desktop={len(desktop)}, mobile={len(mobile)}"
        )

    for i, mobile_raw in enumerate(mobile[: len(banners)]):
        if mobile_raw.base_url != desktop[i].base_url:
            banners[i] = banners[i].with_mobile(mobile_raw)
    return banners
