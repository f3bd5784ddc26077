"""
Banner API Server
=================
FastAPI 서버 진입점 (lifespan: 로깅/설정 검증/스케줄러)

실행:
    uvicorn banner_api.api.server:app --port 3000
    python main.py serve
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from banner_api.api.app_factory import create_app
from banner_api.infrastructure.container import Container
from banner_api.monitoring.logger import setup_logging

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """서버 시작/종료 시 설정 검증 및 새로고침 스케줄러 시작/중지"""
    # === STARTUP ===
    config = Container.get_config()
    setup_logging(config.log_level, config.logs_path)

    # 필수 설정 누락 시 경고만 남기고 서버는 계속 시작 (/health 응답 유지)
    errors = config.validate()
    if errors:
        logger.error("설정 검증 실패:\n" + "\n".join(f"  - {e}" for e in errors))
    logger.info(f"Server starting: {config.to_dict()}")

    scheduler = None
    if config.auto_start_scheduler and config.target_url:
        scheduler = Container.get_scheduler()
        # 시작 직후 1회 스크래핑은 백그라운드에서 (healthcheck 블로킹 방지)
        await scheduler.start(run_immediately=True)
    elif not config.target_url:
        logger.warning("Refresh scheduler not started: DUTCHIE_URL is not set")

    yield

    # === SHUTDOWN ===
    if scheduler is not None:
        scheduler.stop()
        logger.info("Refresh scheduler stopped")


app = create_app(lifespan=lifespan)
