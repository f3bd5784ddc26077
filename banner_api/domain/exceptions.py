"""
Banner API 커스텀 예외 타입

스크래핑 파이프라인 전체에서 사용하는 예외 계층입니다.

분류:
- ConfigurationError: 대상 URL 누락 등 설정 오류 (치명적, 재시도 안 함)
- ScrapeError 계열: 파이프라인 실패 (재시도 대상)
    - NavigationTimeout: 페이지 로드/네트워크 안정화 타임아웃
    - ContentNotFound: 배너 마커 셀렉터가 렌더링되지 않음
    - NoBannersFound: 페이지는 열렸지만 데스크톱 패스 결과가 0건
    - MobilePassFailure: 모바일 보강 패스 실패 (복구 가능, 데스크톱 데이터로 계속)
    - ScrapeInProgressError: 이미 스크래핑 진행 중 (중복 실행 방지)
- CacheStoreError: 캐시 파일 읽기/쓰기 실패

사용 예:
    from banner_api.domain.exceptions import ScrapeError, ConfigurationError

    try:
        result = await manager.scrape()
    except ConfigurationError:
        raise
    except ScrapeError as e:
        logger.error(f"Scrape failed: {e} (type={e.error_type})")
"""

from typing import Optional


class BannerApiError(Exception):
    """
    Base exception for all banner service errors.

    모든 커스텀 예외의 기본 클래스입니다.
    """


class ConfigurationError(BannerApiError):
    """
    Fatal configuration error.

    필수 설정(대상 URL 등)이 없을 때 발생합니다.
    브라우저를 띄우기 전에 검사하며 재시도하지 않습니다.

    Attributes:
        setting: 누락/잘못된 설정 이름 (예: "DUTCHIE_URL")
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message)
        self.setting = setting


class ScrapeError(BannerApiError):
    """
    Scrape pipeline error.

    Attributes:
        url: 스크래핑 대상 URL
        error_type: 에러 유형 (TIMEOUT, NOT_FOUND, EMPTY, MOBILE, IN_PROGRESS, UNEXPECTED)
        attempt: 실패한 시도 번호 (1부터, 재시도 컨트롤러가 설정)
    """

    error_type = "UNEXPECTED"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        error_type: Optional[str] = None,
        attempt: Optional[int] = None,
    ):
        super().__init__(message)
        self.url = url
        if error_type:
            self.error_type = error_type
        self.attempt = attempt


class NavigationTimeout(ScrapeError):
    """페이지 이동 또는 네트워크 안정화 대기 타임아웃"""

    error_type = "TIMEOUT"


class ContentNotFound(ScrapeError):
    """배너 이미지 마커 셀렉터가 제한 시간 내 나타나지 않음"""

    error_type = "NOT_FOUND"


class NoBannersFound(ScrapeError):
    """
    데스크톱 패스에서 배너를 하나도 추출하지 못함

    빈 결과를 성공으로 취급하지 않고 재시도 대상 에러로 처리합니다.
    """

    error_type = "EMPTY"


class MobilePassFailure(ScrapeError):
    """모바일 보강 패스 실패 (스크래퍼 내부에서 잡아 로그만 남김)"""

    error_type = "MOBILE"


class ScrapeInProgressError(ScrapeError):
    """
    이미 스크래핑이 진행 중

    타이머 경합 시 늦게 도착한 쪽이 받는 '이미 실행 중' 신호입니다.
    실패 카운터에 포함하지 않습니다.
    """

    error_type = "IN_PROGRESS"


class CacheStoreError(BannerApiError):
    """
    Cache persistence error.

    Attributes:
        path: 캐시 파일 경로
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
