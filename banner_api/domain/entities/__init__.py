"""Domain entities"""

from banner_api.domain.entities.banner import (
    Banner,
    RawBanner,
    ScrapeResult,
    is_absolute_http_url,
    strip_query,
)
from banner_api.domain.entities.status import ScrapeStatus
from banner_api.domain.entities.viewport import (
    DESKTOP_PROFILE,
    MOBILE_PROFILE,
    ViewportProfile,
)

__all__ = [
    "Banner",
    "RawBanner",
    "ScrapeResult",
    "ScrapeStatus",
    "ViewportProfile",
    "DESKTOP_PROFILE",
    "MOBILE_PROFILE",
    "is_absolute_http_url",
    "strip_query",
]
