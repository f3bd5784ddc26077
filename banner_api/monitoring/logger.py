"""
Logging Setup
=============
로깅 설정 및 필터

- SensitiveDataFilter: API 키 마스킹 (X-API-Key 헤더, ?key= 쿼리, api_key=, Bearer)
- ErrorDeduplicationFilter: 대상 페이지 장애 시 재시도마다 반복되는 동일 에러 억제
- setup_logging(): 콘솔 + 일별 파일 핸들러 설정 (두 필터 공통 적용)
"""

import logging
import re
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_MASK = "****"

# (패턴, 치환) - 순서대로 적용
_SECRET_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"(?i)(x-api-key)[\"']?\s*[:=]\s*[\"']?[^\s\"',;}]+"), rf"\1: {_MASK}"),
    (re.compile(r"(?i)([?&]key=)[^&\s\"']+"), rf"\1{_MASK}"),
    (
        re.compile(
            r"(?i)(api[_-]?key|token|secret|password)[\"']?\s*[:=]\s*[\"']?[\w\-]{8,}[\"']?"
        ),
        rf"\1={_MASK}",
    ),
    (re.compile(r"Bearer\s+[\w\-.]{8,}"), f"Bearer {_MASK}"),
]


def mask_secrets(text: str) -> str:
    """문자열 내 API 키/토큰 마스킹"""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    API 키가 로그에 남지 않도록 메시지와 포맷 인자를 마스킹

    레코드는 항상 통과시키고 내용만 바꿉니다.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = mask_secrets(str(record.msg))
        if isinstance(record.args, dict):
            record.args = {k: self._mask_arg(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._mask_arg(a) for a in record.args)
        return True

    @staticmethod
    def _mask_arg(value: Any) -> Any:
        return mask_secrets(value) if isinstance(value, str) else value


@dataclass
class _DedupEntry:
    first_seen: float
    count: int = 1
    suppressed: int = 0


class ErrorDeduplicationFilter(logging.Filter):
    """
    반복 에러 억제 필터

    대상 페이지가 내려가면 재시도와 스케줄 실행마다 같은 에러가 쌓입니다.
    WARNING 이상 메시지를 시도 번호/시각/URL 쿼리를 무시한 키로 묶어,
    window_seconds 안에서 max_count를 넘는 것은 버리고
    첫 억제 시와 10건마다 한 줄 요약만 남깁니다.
    """

    _TIMESTAMP = re.compile(r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(\.\d+)?([+-]\d{2}:\d{2}|Z)?")
    _URL_QUERY = re.compile(r"(https?://[^\s?'\"]+)\?[^\s'\"]*")
    _NUMBER = re.compile(r"\d+(\.\d+)?")

    def __init__(self, window_seconds: int = 60, max_count: int = 3, name: str = ""):
        super().__init__(name)
        self.window_seconds = window_seconds
        self.max_count = max_count
        self._entries: dict[str, _DedupEntry] = {}

    def _group_key(self, record: logging.LogRecord) -> str:
        text = self._TIMESTAMP.sub("<ts>", str(record.msg))
        text = self._URL_QUERY.sub(r"\1", text)
        text = self._NUMBER.sub("<n>", text)
        return f"{record.levelno}:{text[:200]}"

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno < logging.WARNING:
            return True

        now = time.time()
        self._expire(now)
        key = self._group_key(record)

        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = _DedupEntry(first_seen=now)
            return True

        entry.count += 1
        if entry.count <= self.max_count:
            return True

        entry.suppressed += 1
        if entry.suppressed == 1 or entry.suppressed % 10 == 0:
            # args까지 포맷한 뒤 자름 (템플릿만 자르면 자리표시자가 잘림)
            record.msg = (
                f"[Dedup] suppressed {entry.suppressed} repeats of: {record.getMessage()[:100]}"
            )
            record.args = ()
            return True
        return False

    def _expire(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if now - e.first_seen > self.window_seconds]
        for key in expired:
            entry = self._entries.pop(key)
            if entry.suppressed:
                logging.getLogger(__name__).info(
                    f"[Dedup] window closed: {entry.suppressed} repeats suppressed "
                    f"in {self.window_seconds}s"
                )

    def get_stats(self) -> dict[str, Any]:
        return {
            "tracked_messages": len(self._entries),
            "total_suppressed": sum(e.suppressed for e in self._entries.values()),
            "window_seconds": self.window_seconds,
            "max_count": self.max_count,
        }


def setup_logging(
    level: str = "INFO", log_dir: str | Path | None = "./logs", name: str = "banner_api"
) -> logging.Logger:
    """
    루트 로거 설정 (여러 번 호출해도 핸들러 중복 없음)

    Args:
        level: 콘솔 로그 레벨
        log_dir: 일별 로그 파일 디렉토리 (None이면 파일 로그 생략)
        name: 로그 파일 이름 접두사

    Returns:
        설정된 루트 로거
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # 이전 호출에서 추가한 핸들러만 제거
    for handler in list(root.handlers):
        if getattr(handler, "_banner_api_handler", False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    handlers: list[logging.Handler] = [console]

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"{name}_{datetime.now():%Y-%m-%d}.log"
        daily = logging.FileHandler(log_file, encoding="utf-8")
        daily.setLevel(logging.DEBUG)
        daily.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(daily)

    masking = SensitiveDataFilter()
    for handler in handlers:
        handler.addFilter(masking)
        # 핸들러마다 별도 카운터 (공유하면 레코드가 두 번 집계됨)
        handler.addFilter(ErrorDeduplicationFilter(window_seconds=60, max_count=3))
        handler._banner_api_handler = True
        root.addHandler(handler)

    # 서드파티 라이브러리 DEBUG 로그 억제
    for noisy in ("asyncio", "urllib3", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return root
