"""
Scrape Status
=============
프로세스 로컬 스크래핑 상태 (영속화하지 않음)

ScrapeManager와 RefreshScheduler만 이 객체를 변경합니다.
읽기 경로(API, 캐시 조회)는 to_dict() 스냅샷만 사용합니다.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class ScrapeStatus:
    """스크래핑 카운터 및 타임스탬프"""

    last_attempt: datetime | None = None
    last_success: datetime | None = None
    last_error: str | None = None
    consecutive_failures: int = 0
    total_scrapes: int = 0
    total_failures: int = 0
    is_running: bool = False
    next_scheduled: datetime | None = None
    last_attempt_count: int = 0  # 마지막 호출에서 사용한 파이프라인 시도 횟수

    def record_start(self, now: datetime) -> None:
        self.is_running = True
        self.last_attempt = now
        self.total_scrapes += 1
        self.last_attempt_count = 0

    def record_success(self, now: datetime) -> None:
        self.last_success = now
        self.last_error = None
        self.consecutive_failures = 0

    def record_failure(self, error: BaseException) -> None:
        self.last_error = str(error) or type(error).__name__
        self.consecutive_failures += 1
        self.total_failures += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastAttempt": _iso(self.last_attempt),
            "lastSuccess": _iso(self.last_success),
            "lastError": self.last_error,
            "consecutiveFailures": self.consecutive_failures,
            "totalScrapes": self.total_scrapes,
            "totalFailures": self.total_failures,
            "isRunning": self.is_running,
            "nextScheduled": _iso(self.next_scheduled),
            "lastAttemptCount": self.last_attempt_count,
        }
