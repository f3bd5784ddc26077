"""
Banner Domain Entities
======================
배너 관련 핵심 엔티티: RawBanner, Banner, ScrapeResult

JSON 직렬화 시 필드명은 camelCase (mobileSrc, scrapedAt 등)를 사용합니다.
WordPress 플러그인과 위젯이 이 형식을 그대로 소비합니다.
"""

from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def strip_query(url: str) -> str:
    """
    쿼리스트링/프래그먼트를 제거한 기준 URL 반환

    대상 페이지는 캐러셀 슬라이드 DOM 노드를 재활용하면서
    캐시 버스팅용 쿼리만 다른 중복 이미지를 만들어 냅니다.
    """
    if not url:
        return ""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def is_absolute_http_url(url: Optional[str]) -> bool:
    """http(s) 스킴과 호스트를 가진 절대 URL인지 확인"""
    if not url:
        return False
    parts = urlsplit(url)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RawBanner(_CamelModel):
    """
    페이지에서 수집한 원본 이미지/링크 레코드

    한 번의 수집(collect) 호출 결과이며 아직 ID가 부여되지 않은 상태입니다.
    """

    src: str
    srcset: Optional[str] = None
    alt: str = ""
    link: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def base_url(self) -> str:
        """쿼리 제거된 이미지 URL (중복 판단 키)"""
        return strip_query(self.src)


class Banner(_CamelModel):
    """
    프로모션 배너 엔티티

    Attributes:
        id: 데스크톱 패스 수집 순서 기반 서수 ID
        src, srcset: 데스크톱 이미지
        mobile_src, mobile_srcset: 모바일 이미지 (데스크톱과 다를 때만 설정)
        alt: 대체 텍스트 (없으면 빈 문자열)
        link: 이미지를 감싼 링크 URL
        width, height: 데스크톱 이미지 원본 크기
        mobile_width, mobile_height: 모바일 이미지 원본 크기
    """

    id: int = Field(..., ge=0, description="데스크톱 패스 서수")
    src: str
    srcset: Optional[str] = None
    mobile_src: Optional[str] = None
    mobile_srcset: Optional[str] = None
    alt: str = ""
    link: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    mobile_width: Optional[int] = None
    mobile_height: Optional[int] = None

    @classmethod
    def from_raw(cls, ordinal: int, raw: RawBanner) -> "Banner":
        """데스크톱 원본 레코드로부터 배너 생성 (모바일 필드는 null)"""
        return cls(
            id=ordinal,
            src=raw.src,
            srcset=raw.srcset,
            alt=raw.alt or "",
            link=raw.link,
            width=raw.width,
            height=raw.height,
        )

    def with_mobile(self, mobile: RawBanner) -> "Banner":
        """모바일 패스 이미지로 보강한 사본 반환"""
        return self.model_copy(
            update={
                "mobile_src": mobile.src,
                "mobile_srcset": mobile.srcset,
                "mobile_width": mobile.width,
                "mobile_height": mobile.height,
            }
        )


class ScrapeResult(_CamelModel):
    """
    스크래핑 결과 봉투 (캐시에 저장되는 유일한 단위)

    성공한 스크래핑에서만 생성되며, 이전 캐시를 원자적으로 통째로 교체합니다.
    """

    banners: list[Banner]
    scraped_at: datetime
    source: str
    count: int

    @model_validator(mode="after")
    def _check_count(self) -> "ScrapeResult":
        if self.count != len(self.banners):
            raise ValueError(f"count ({self.count}) != len(banners) ({len(self.banners)})")
        return self

    @classmethod
    def build(
        cls, banners: list[Banner], source: str, scraped_at: Optional[datetime] = None
    ) -> "ScrapeResult":
        return cls(
            banners=banners,
            scraped_at=scraped_at or datetime.now(timezone.utc),
            source=source,
            count=len(banners),
        )

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        """scraped_at 기준 경과 시간 (초)"""
        now = now or datetime.now(timezone.utc)
        scraped_at = self.scraped_at
        if scraped_at.tzinfo is None:
            scraped_at = scraped_at.replace(tzinfo=timezone.utc)
        return (now - scraped_at).total_seconds()

    def to_json_dict(self) -> dict:
        """API/파일 저장용 camelCase dict"""
        return self.model_dump(mode="json", by_alias=True)
