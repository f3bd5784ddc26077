"""
Banner API Configuration
========================
대상 URL, 스크래핑 주기/재시도, 캐시 경로, API 키, 스크래퍼 튜닝 값

주요 기능:
- 환경변수 및 JSON 파일(config/scraper.json)에서 설정 로드
- 시작 시 설정 검증 (validate)
- 플랫폼별 브라우저 실행 파일 기본 경로 탐색
"""

import json
import logging
import os
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from banner_api.domain.entities.viewport import (
    DESKTOP_PROFILE,
    MOBILE_PROFILE,
    ViewportProfile,
)
from banner_api.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SCRAPE_INTERVAL_MINUTES = 60

LINUX_BROWSER_CANDIDATES = (
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/bin/google-chrome",
)
MACOS_BROWSER_CANDIDATES = (
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
)


def default_browser_executable() -> str | None:
    """
    플랫폼별 기본 브라우저 실행 파일 경로

    Returns:
        존재하는 첫 번째 후보 경로. 없으면 None (Playwright 번들 Chromium 사용)
    """
    if sys.platform.startswith("linux"):
        candidates = LINUX_BROWSER_CANDIDATES
    elif sys.platform == "darwin":
        candidates = MACOS_BROWSER_CANDIDATES
    else:
        return None
    for candidate in candidates:
        if Path(candidate).exists():
            return candidate
    return None


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"[Config Warning] {name}={raw!r} is not an integer, using {default}")
        return default
    if value < minimum:
        logger.warning(f"[Config Warning] {name}={value} below {minimum}, using {default}")
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[Config Warning] {name}={raw!r} is not a number, using {default}")
        return default


@dataclass
class ScraperSettings:
    """
    스크래퍼 튜닝 상수

    대상 사이트 렌더링에 맞춰 경험적으로 조정한 값들이므로
    불변 조건이 아니라 설정으로 취급합니다. (config/scraper.json으로 덮어쓰기 가능)
    """

    navigation_timeout_ms: int = 60_000
    selector_timeout_ms: int = 30_000
    initial_settle_seconds: float = 3.0
    click_settle_seconds: float = 1.0
    max_clicks: int = 20
    stable_rounds: int = 3
    block_resources: bool = True
    headless: bool = True
    desktop: ViewportProfile = DESKTOP_PROFILE
    mobile: ViewportProfile = MOBILE_PROFILE
    mobile_pass_enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScraperSettings":
        """JSON dict에서 생성 (알 수 없는 키는 무시)"""
        settings = cls()
        known = {f.name for f in fields(cls)}
        updates: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"[Config Warning] unknown scraper setting ignored: {key}")
                continue
            if key in ("desktop", "mobile"):
                base = getattr(settings, key)
                updates[key] = replace(base, **value)
            else:
                updates[key] = value
        return replace(settings, **updates)


@dataclass
class AppConfig:
    """
    서비스 설정 (AppConfig.from_env()로 생성)

    target_url이 없으면 서버는 뜨지만 스크래핑은 ConfigurationError로 거부됩니다.
    """

    # Target
    target_url: str | None = None

    # Paths
    base_path: Path = field(default_factory=lambda: Path.cwd())
    data_path: Path = field(
        default_factory=lambda: Path("/data") if Path("/data").exists() else Path.cwd() / "data"
    )
    logs_path: Path = field(default_factory=lambda: Path.cwd() / "logs")
    config_path: Path = field(default_factory=lambda: Path.cwd() / "config")

    # Browser
    browser_executable_path: str | None = None
    site_adapter: str = "dutchie"

    # Schedule / retry
    scrape_interval_minutes: int = DEFAULT_SCRAPE_INTERVAL_MINUTES
    max_retries: int = 3
    retry_delay_seconds: float = 5.0
    failure_retry_minutes: int = 5
    staleness_multiplier: int = 2
    auto_start_scheduler: bool = True

    # Server
    api_key: str | None = None
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    scraper: ScraperSettings = field(default_factory=ScraperSettings)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경변수에서 설정 로드"""
        config = cls()

        config.target_url = (
            os.environ.get("DUTCHIE_URL") or os.environ.get("TARGET_URL") or ""
        ).strip() or None
        config.browser_executable_path = (
            os.environ.get("PUPPETEER_EXECUTABLE_PATH")
            or os.environ.get("BROWSER_EXECUTABLE_PATH")
            or default_browser_executable()
        )
        config.site_adapter = os.environ.get("SITE_ADAPTER", config.site_adapter).strip().lower()
        if os.environ.get("DATA_DIR"):
            config.data_path = Path(os.environ["DATA_DIR"])

        config.scrape_interval_minutes = _env_int(
            "SCRAPE_INTERVAL_MINUTES", DEFAULT_SCRAPE_INTERVAL_MINUTES, minimum=1
        )
        config.max_retries = _env_int("MAX_RETRIES", config.max_retries)
        config.retry_delay_seconds = _env_float("RETRY_DELAY_SECONDS", config.retry_delay_seconds)
        config.failure_retry_minutes = _env_int(
            "FAILURE_RETRY_MINUTES", config.failure_retry_minutes, minimum=1
        )
        config.staleness_multiplier = _env_int(
            "STALENESS_MULTIPLIER", config.staleness_multiplier, minimum=1
        )
        config.auto_start_scheduler = (
            os.environ.get("AUTO_START_SCHEDULER", "true").lower() == "true"
        )

        config.api_key = os.environ.get("API_KEY") or None
        origins = os.environ.get("ALLOWED_ORIGINS")
        if origins:
            config.allowed_origins = [o.strip() for o in origins.split(",") if o.strip()]
        config.port = _env_int("PORT", config.port)
        config.log_level = os.environ.get("LOG_LEVEL", config.log_level).upper()

        config._load_scraper_settings()

        return config

    def _load_scraper_settings(self) -> None:
        """scraper.json 로드 (있는 경우)"""
        settings_path = self.config_path / "scraper.json"
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = json.load(f)
            self.scraper = ScraperSettings.from_dict(data.get("scraper", data))

    @property
    def cache_file(self) -> Path:
        return self.data_path / "banners.json"

    @property
    def staleness_threshold_seconds(self) -> float:
        """캐시 신선도 임계값 = 스크래핑 주기 × 배수"""
        return self.scrape_interval_minutes * 60 * self.staleness_multiplier

    def require_target_url(self) -> str:
        """
        대상 URL 반환

        Raises:
            ConfigurationError: 대상 URL 미설정 시
        """
        if not self.target_url:
            raise ConfigurationError(
                "DUTCHIE_URL environment variable is required. "
                "Set it to your Dutchie embedded menu URL.",
                setting="DUTCHIE_URL",
            )
        return self.target_url

    def validate(self) -> list[str]:
        """설정 검증

        빈 리스트 반환 시 모든 검증 통과.

        Returns:
            오류 메시지 목록
        """
        errors: list[str] = []
        warnings: list[str] = []

        # === 필수 검증 ===
        if not self.target_url:
            errors.append("DUTCHIE_URL이 설정되지 않았습니다")

        if self.port < 1 or self.port > 65535:
            errors.append(f"PORT 범위 오류: 1-65535 필요, 현재 {self.port}")

        if self.max_retries < 0:
            errors.append(f"MAX_RETRIES는 0 이상이어야 합니다: {self.max_retries}")

        if self.retry_delay_seconds < 0:
            errors.append(f"RETRY_DELAY_SECONDS는 0 이상이어야 합니다: {self.retry_delay_seconds}")

        # === 경고 ===
        if not self.api_key:
            warnings.append("API_KEY가 설정되지 않았습니다 (인증 비활성화)")

        if self.browser_executable_path and not Path(self.browser_executable_path).exists():
            warnings.append(f"브라우저 실행 파일이 없습니다: {self.browser_executable_path}")

        for w in warnings:
            logger.warning(f"[Config Warning] {w}")

        return errors

    @classmethod
    def from_env_validated(cls, fail_fast: bool = True) -> "AppConfig":
        """환경변수에서 설정 로드 + 검증

        Args:
            fail_fast: True면 필수 설정 누락 시 ConfigurationError 발생.
                       False면 에러만 로깅하고 config 반환.

        Raises:
            ConfigurationError: fail_fast=True이고 필수 설정 누락 시
        """
        config = cls.from_env()
        errors = config.validate()

        if errors:
            error_msg = "설정 검증 실패:\n" + "\n".join(f"  - {e}" for e in errors)
            if fail_fast:
                raise ConfigurationError(error_msg)
            logger.error(error_msg)

        return config

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환 (비밀값 제외)"""
        return {
            "target_url": self.target_url,
            "data_path": str(self.data_path),
            "cache_file": str(self.cache_file),
            "browser_executable_path": self.browser_executable_path,
            "site_adapter": self.site_adapter,
            "scrape_interval_minutes": self.scrape_interval_minutes,
            "staleness_threshold_seconds": self.staleness_threshold_seconds,
            "max_retries": self.max_retries,
            "retry_delay_seconds": self.retry_delay_seconds,
            "failure_retry_minutes": self.failure_retry_minutes,
            "auto_start_scheduler": self.auto_start_scheduler,
            "api_key_enabled": bool(self.api_key),
            "allowed_origins": self.allowed_origins,
            "port": self.port,
        }
