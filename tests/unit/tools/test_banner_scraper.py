"""
BannerScraper (2패스) 테스트
============================
세션은 FakeSessionFactory, 추출기는 AsyncMock으로 대체
"""

import logging
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from banner_api.domain.entities.banner import RawBanner
from banner_api.domain.exceptions import (
    CacheStoreError,
    NavigationTimeout,
    NoBannersFound,
    ScrapeError,
)
from banner_api.infrastructure.persistence.json_repository import JsonBannerRepository
from banner_api.tools.scrapers.banner_scraper import BannerScraper
from banner_api.tools.scrapers.site_adapters import DutchieSiteAdapter

URL = "https://dutchie.com/embedded-menu/test-store"


@pytest.fixture
def repository(tmp_path):
    return JsonBannerRepository(tmp_path / "banners.json")


@pytest.fixture
def scraper(fast_settings, session_factory, repository):
    return BannerScraper(
        adapter=DutchieSiteAdapter(),
        settings=fast_settings,
        executable_path="/usr/bin/chromium",
        repository=repository,
        session_factory=session_factory,
    )


def _by_profile(desktop, mobile):
    """프로필 이름별로 결과(또는 예외)를 돌려주는 extract_at_viewport 대체"""

    async def extract(session, url, profile, walker=None):
        outcome = desktop if profile.name == "desktop" else mobile
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return AsyncMock(side_effect=extract)


class TestScrape:
    @pytest.mark.asyncio
    async def test_five_banners_index_two_mobile_variant(
        self, scraper, session_factory, repository, make_raw
    ):
        desktop = [make_raw(f"b{i}") for i in range(5)]
        mobile = [make_raw(f"b{i}", "m=1") for i in range(5)]
        mobile[2] = make_raw("b2-portrait")
        scraper.extractor.extract_at_viewport = _by_profile(desktop, mobile)

        result = await scraper.scrape(URL)

        assert result.count == 5
        assert [b.id for b in result.banners] == [0, 1, 2, 3, 4]
        assert result.banners[2].mobile_src == "https://images.dutchie.com/b2-portrait.jpg"
        assert all(b.mobile_src is None for i, b in enumerate(result.banners) if i != 2)
        assert result.source == URL
        # 두 패스 모두 같은 세션 1개에서 실행
        assert session_factory.events == ["open", "close"]
        assert (await repository.load()).count == 5

    @pytest.mark.asyncio
    async def test_session_options(self, scraper, session_factory, make_raw):
        scraper.extractor.extract_at_viewport = _by_profile([make_raw("a")], [make_raw("a")])
        await scraper.scrape(URL)
        session = session_factory.sessions[0]
        assert session.executable_path == "/usr/bin/chromium"
        assert session.headless is True

    @pytest.mark.asyncio
    async def test_walker_used_for_both_passes(self, scraper, make_raw):
        scraper.extractor.extract_at_viewport = _by_profile([make_raw("a")], [make_raw("a")])
        await scraper.scrape(URL)
        calls = scraper.extractor.extract_at_viewport.await_args_list
        assert [c.args[2].name for c in calls] == ["desktop", "mobile"]
        assert all(c.kwargs["walker"] is scraper.walker for c in calls)

    @pytest.mark.asyncio
    async def test_empty_desktop_pass_raises_and_closes_session(
        self, scraper, session_factory, repository
    ):
        scraper.extractor.extract_at_viewport = _by_profile([], [])

        with pytest.raises(NoBannersFound, match="No banners found on page"):
            await scraper.scrape(URL)

        assert session_factory.sessions[0].close_count == 1
        assert repository.exists() is False

    @pytest.mark.asyncio
    async def test_desktop_navigation_timeout_propagates(self, scraper, session_factory):
        scraper.extractor.extract_at_viewport = _by_profile(
            NavigationTimeout("timeout", url=URL), []
        )
        with pytest.raises(NavigationTimeout):
            await scraper.scrape(URL)
        assert session_factory.events == ["open", "close"]

    @pytest.mark.asyncio
    async def test_mobile_failure_degrades_to_desktop_only(self, scraper, make_raw, caplog):
        scraper.extractor.extract_at_viewport = _by_profile(
            [make_raw("a"), make_raw("b")], NavigationTimeout("mobile timeout", url=URL)
        )

        with caplog.at_level(logging.WARNING):
            result = await scraper.scrape(URL)

        assert result.count == 2
        assert all(b.mobile_src is None for b in result.banners)
        assert "Mobile pass failed" in caplog.text

    @pytest.mark.asyncio
    async def test_mobile_pass_disabled(self, fast_settings, session_factory, make_raw):
        scraper = BannerScraper(
            DutchieSiteAdapter(),
            settings=replace(fast_settings, mobile_pass_enabled=False),
            session_factory=session_factory,
        )
        scraper.extractor.extract_at_viewport = _by_profile([make_raw("a")], [make_raw("x")])

        result = await scraper.scrape(URL)

        assert scraper.extractor.extract_at_viewport.await_count == 1
        assert result.banners[0].mobile_src is None

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, scraper, session_factory):
        scraper.extractor.extract_at_viewport = _by_profile(ValueError("bad data"), [])

        with pytest.raises(ScrapeError) as exc_info:
            await scraper.scrape(URL)

        assert exc_info.value.error_type == "UNEXPECTED"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert session_factory.sessions[0].close_count == 1

    @pytest.mark.asyncio
    async def test_persist_failure_is_scrape_error(self, scraper, repository, make_raw):
        scraper.extractor.extract_at_viewport = _by_profile([make_raw("a")], None)
        repository.save = AsyncMock(side_effect=CacheStoreError("disk full"))

        with pytest.raises(ScrapeError) as exc_info:
            await scraper.scrape(URL)

        assert isinstance(exc_info.value.__cause__, CacheStoreError)

    @pytest.mark.asyncio
    async def test_unexpected_persist_error_wrapped(self, scraper, repository, make_raw):
        scraper.extractor.extract_at_viewport = _by_profile([make_raw("a")], None)
        repository.save = AsyncMock(side_effect=TypeError("not serializable"))

        with pytest.raises(ScrapeError) as exc_info:
            await scraper.scrape(URL)

        assert exc_info.value.error_type == "UNEXPECTED"
        assert isinstance(exc_info.value.__cause__, TypeError)

    @pytest.mark.asyncio
    async def test_unexpected_merge_error_wrapped(self, scraper, make_raw, monkeypatch):
        scraper.extractor.extract_at_viewport = _by_profile([make_raw("a")], None)

        def broken_merge(desktop, mobile):
            raise KeyError("id")

        monkeypatch.setattr(
            "banner_api.tools.scrapers.banner_scraper.merge_passes", broken_merge
        )

        with pytest.raises(ScrapeError) as exc_info:
            await scraper.scrape(URL)

        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_invalid_src_flagged_not_failed(self, scraper, make_raw, caplog):
        scraper.extractor.extract_at_viewport = _by_profile(
            [make_raw("a"), RawBanner(src="data:image/gif;base64,R0lGOD")], None
        )

        with caplog.at_level(logging.WARNING):
            result = await scraper.scrape(URL)

        assert result.count == 2
        assert "Banner 1 has invalid src URL" in caplog.text
