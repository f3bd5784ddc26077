"""
Site Adapters
=============
SiteAdapter Protocol 구현체

## Dutchie 임베디드 메뉴
- 배너 이미지: class에 "menu-image__MainImage"가 포함된 <img>
- 링크: 이미지를 감싼 가장 가까운 <a>
- 다음 버튼: 마크업이 자주 바뀌므로 여러 구조/속성 패턴을 순서대로 시도
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DutchieSiteAdapter:
    """Dutchie 임베디드 메뉴 배너 캐러셀 어댑터"""

    name: str = "dutchie"
    image_selector: str = 'img[class*="menu-image__MainImage"]'
    link_selector: str = "a"
    next_control_selectors: tuple[str, ...] = (
        'button[class*="arrow"][class*="right"]',
        'button[class*="arrow"][class*="next"]',
        'button[class*="Next"]',
        'button[aria-label*="next" i]',
        '[class*="carousel"] button:last-of-type',
        '[class*="banner"] button:last-of-type',
    )
    blocked_resource_types: frozenset[str] = field(
        default_factory=lambda: frozenset({"font", "stylesheet"})
    )


def get_site_adapter(name: str = "dutchie"):
    """이름으로 어댑터 조회"""
    adapters = {"dutchie": DutchieSiteAdapter}
    try:
        return adapters[name]()
    except KeyError:
        raise ValueError(f"Unknown site adapter: {name}") from None
