"""
Site Adapter Protocol
=====================
서드파티 페이지 마크업 의존성을 격리하는 인터페이스

대상 사이트의 마크업이 바뀌면 이 프로토콜의 구현체 하나만 교체합니다.

구현체:
- DutchieSiteAdapter (banner_api/tools/scrapers/site_adapters.py)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SiteAdapter(Protocol):
    """
    Site Adapter Protocol

    Attributes:
        name: 어댑터 이름 (로그용)
        image_selector: 배너 이미지 마커 셀렉터 (대기 + 수집 대상)
        link_selector: 이미지를 감싼 링크를 찾는 closest() 셀렉터
        next_control_selectors: 캐러셀 '다음' 버튼 후보 셀렉터 (우선순위 순)
        blocked_resource_types: 로드를 차단할 리소스 유형
    """

    name: str

    @property
    def image_selector(self) -> str: ...

    @property
    def link_selector(self) -> str: ...

    @property
    def next_control_selectors(self) -> tuple[str, ...]: ...

    @property
    def blocked_resource_types(self) -> frozenset[str]: ...
