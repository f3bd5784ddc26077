"""
Dutchie Banner API
메인 진입점

Dutchie 임베디드 메뉴 프로모션 배너 스크래핑 및 API 서버
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from banner_api.domain.exceptions import BannerApiError
from banner_api.infrastructure.container import Container
from banner_api.monitoring.logger import setup_logging

# 환경 변수 로드
load_dotenv()

logger = logging.getLogger("main")


async def run_scrape(url: str | None = None) -> int:
    """
    1회 스크래핑 실행 (캐시 갱신)

    Returns:
        종료 코드 (0: 성공, 1: 실패)
    """
    manager = Container.get_scrape_manager()
    try:
        result = await manager.scrape(url)
    except BannerApiError as e:
        logger.error(f"Scrape failed: {e}")
        return 1

    logger.info("=" * 50)
    logger.info(f"Scraped {result.count} banners from {result.source}")
    for banner in result.banners:
        mobile = " (mobile variant)" if banner.mobile_src else ""
        logger.info(f"  [{banner.id}] {banner.src}{mobile}")
    logger.info("=" * 50)
    return 0


async def show_status() -> int:
    """캐시 요약 출력 (스크래핑하지 않음)"""
    config = Container.get_config()
    cached = await Container.get_repository().load()
    if cached is None:
        logger.info(f"No cached banners at {config.cache_file}")
        return 1

    age_minutes = cached.age_seconds() / 60
    stale = cached.age_seconds() > config.staleness_threshold_seconds
    logger.info(f"Cache file: {config.cache_file}")
    logger.info(f"Source: {cached.source}")
    logger.info(f"Banners: {cached.count}")
    logger.info(f"Scraped at: {cached.scraped_at.isoformat()} ({age_minutes:.0f} min ago)")
    logger.info(f"Stale: {'yes' if stale else 'no'}")
    return 0


def run_server(host: str | None = None, port: int | None = None) -> None:
    """API 서버 실행"""
    import uvicorn

    config = Container.get_config()
    uvicorn.run(
        "banner_api.api.server:app",
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
    )


def main():
    """메인 함수"""
    parser = argparse.ArgumentParser(
        description="Dutchie Banner API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start API server (scheduler included)
  python main.py serve --port 3000

  # Run one scrape and update the cache
  python main.py scrape

  # Show cached data summary
  python main.py status
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", type=str, help="Bind host (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: PORT or 3000)")

    scrape_parser = subparsers.add_parser("scrape", help="Run one scrape and update the cache")
    scrape_parser.add_argument("--url", type=str, help="Target URL (default: DUTCHIE_URL)")

    subparsers.add_parser("status", help="Show cached banner summary")

    args = parser.parse_args()

    config = Container.get_config()
    setup_logging(config.log_level, config.logs_path)

    if args.command == "serve":
        run_server(args.host, args.port)
    elif args.command == "scrape":
        sys.exit(asyncio.run(run_scrape(args.url)))
    else:
        sys.exit(asyncio.run(show_status()))


if __name__ == "__main__":
    main()
