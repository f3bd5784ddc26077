"""
Viewport Profile
================
패스별 뷰포트/User-Agent 조합

대상 페이지는 디바이스 클래스에 따라 다른 마크업과 이미지를 렌더링하므로
데스크톱(기준) 패스와 모바일(보강) 패스를 서로 다른 프로필로 실행합니다.
"""

from dataclasses import dataclass, field

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.2 Mobile/15E148 Safari/604.1"
)


@dataclass(frozen=True)
class ViewportProfile:
    """브라우저 컨텍스트 생성 시 적용할 뷰포트/신원"""

    name: str
    width: int
    height: int
    user_agent: str
    is_mobile: bool = False
    device_scale_factor: float = field(default=1.0)

    def context_options(self) -> dict:
        """Playwright browser.new_context() 인자"""
        options = {
            "viewport": {"width": self.width, "height": self.height},
            "user_agent": self.user_agent,
            "device_scale_factor": self.device_scale_factor,
        }
        if self.is_mobile:
            options["is_mobile"] = True
            options["has_touch"] = True
        return options


DESKTOP_PROFILE = ViewportProfile("desktop", 1400, 900, DESKTOP_USER_AGENT)
MOBILE_PROFILE = ViewportProfile(
    "mobile", 390, 844, MOBILE_USER_AGENT, is_mobile=True, device_scale_factor=3.0
)
