"""
Banner 도메인 엔티티 테스트
===========================
RawBanner, Banner, ScrapeResult, ViewportProfile, URL 헬퍼
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from banner_api.domain.entities import (
    DESKTOP_PROFILE,
    MOBILE_PROFILE,
    Banner,
    RawBanner,
    ScrapeResult,
    is_absolute_http_url,
    strip_query,
)
from banner_api.domain.interfaces import SiteAdapter
from banner_api.tools.scrapers.site_adapters import DutchieSiteAdapter, get_site_adapter


class TestUrlHelpers:
    def test_strip_query_removes_query_and_fragment(self):
        assert (
            strip_query("https://images.dutchie.com/a.jpg?w=1200&auto=format#x")
            == "https://images.dutchie.com/a.jpg"
        )

    def test_strip_query_without_query(self):
        assert strip_query("https://images.dutchie.com/a.jpg") == "https://images.dutchie.com/a.jpg"

    def test_strip_query_empty(self):
        assert strip_query("") == ""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://images.dutchie.com/a.jpg", True),
            ("http://example.com/a.png", True),
            ("data:image/png;base64,AAAA", False),
            ("/relative/a.jpg", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_absolute_http_url(self, url, expected):
        assert is_absolute_http_url(url) is expected


class TestRawBanner:
    def test_base_url(self):
        raw = RawBanner(src="https://images.dutchie.com/a.jpg?v=2")
        assert raw.base_url == "https://images.dutchie.com/a.jpg"

    def test_defaults(self):
        raw = RawBanner(src="https://images.dutchie.com/a.jpg")
        assert raw.srcset is None
        assert raw.alt == ""
        assert raw.link is None
        assert raw.width is None

    def test_accepts_collected_js_record(self):
        raw = RawBanner.model_validate(
            {
                "src": "https://images.dutchie.com/a.jpg",
                "srcset": None,
                "alt": "Sale",
                "link": "https://shop.example.com/deals",
                "width": 1200,
                "height": 400,
            }
        )
        assert raw.link == "https://shop.example.com/deals"
        assert raw.width == 1200


class TestBanner:
    def test_from_raw_assigns_ordinal_and_null_mobile_fields(self):
        raw = RawBanner(src="https://images.dutchie.com/a.jpg", alt="A", width=10, height=5)
        banner = Banner.from_raw(3, raw)
        assert banner.id == 3
        assert banner.src == raw.src
        assert banner.mobile_src is None
        assert banner.mobile_srcset is None
        assert banner.mobile_width is None

    def test_with_mobile_returns_enriched_copy(self):
        desktop = Banner.from_raw(0, RawBanner(src="https://images.dutchie.com/d.jpg"))
        mobile = RawBanner(src="https://images.dutchie.com/m.jpg", srcset="m 1x", width=390)

        enriched = desktop.with_mobile(mobile)

        assert enriched.mobile_src == "https://images.dutchie.com/m.jpg"
        assert enriched.mobile_srcset == "m 1x"
        assert enriched.mobile_width == 390
        assert desktop.mobile_src is None

    def test_negative_id_rejected(self):
        with pytest.raises(ValidationError):
            Banner(id=-1, src="https://images.dutchie.com/a.jpg")

    def test_camel_case_serialization(self):
        banner = Banner(id=0, src="s", mobile_src="m", mobile_width=1)
        data = banner.model_dump(by_alias=True)
        assert data["mobileSrc"] == "m"
        assert data["mobileWidth"] == 1
        assert "mobile_src" not in data

    def test_populate_by_alias_and_name(self):
        assert Banner.model_validate({"id": 0, "src": "s", "mobileSrc": "m"}).mobile_src == "m"
        assert Banner(id=0, src="s", mobile_src="m").mobile_src == "m"


class TestScrapeResult:
    def _banners(self, n):
        return [
            Banner.from_raw(i, RawBanner(src=f"https://images.dutchie.com/{i}.jpg"))
            for i in range(n)
        ]

    def test_build_sets_count_and_timestamp(self):
        result = ScrapeResult.build(self._banners(3), source="https://dutchie.com/x")
        assert result.count == 3
        assert result.source == "https://dutchie.com/x"
        assert result.scraped_at.tzinfo is not None

    def test_count_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            ScrapeResult(
                banners=self._banners(2),
                scraped_at=datetime.now(timezone.utc),
                source="x",
                count=3,
            )

    def test_ids_match_ordinal_positions(self):
        result = ScrapeResult.build(self._banners(5), source="x")
        assert [b.id for b in result.banners] == list(range(result.count))

    def test_age_seconds(self):
        scraped_at = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        result = ScrapeResult.build([], source="x", scraped_at=scraped_at)
        assert result.age_seconds(now=scraped_at + timedelta(minutes=90)) == 5400

    def test_age_seconds_naive_timestamp_treated_as_utc(self):
        result = ScrapeResult.build([], source="x", scraped_at=datetime(2025, 1, 1, 12, 0))
        now = datetime(2025, 1, 1, 13, 0, tzinfo=timezone.utc)
        assert result.age_seconds(now=now) == 3600

    def test_to_json_dict_round_trip(self):
        result = ScrapeResult.build(self._banners(2), source="x")
        data = result.to_json_dict()

        assert set(data) == {"banners", "scrapedAt", "source", "count"}
        assert isinstance(data["scrapedAt"], str)
        assert ScrapeResult.model_validate(data).to_json_dict() == data


class TestViewportProfile:
    def test_desktop_context_options(self):
        options = DESKTOP_PROFILE.context_options()
        assert options["viewport"] == {"width": 1400, "height": 900}
        assert "Windows" in options["user_agent"]
        assert "is_mobile" not in options

    def test_mobile_context_options(self):
        options = MOBILE_PROFILE.context_options()
        assert options["viewport"] == {"width": 390, "height": 844}
        assert "iPhone" in options["user_agent"]
        assert options["is_mobile"] is True
        assert options["has_touch"] is True


class TestSiteAdapter:
    def test_dutchie_adapter_satisfies_protocol(self):
        assert isinstance(DutchieSiteAdapter(), SiteAdapter)

    def test_dutchie_selectors(self):
        adapter = get_site_adapter("dutchie")
        assert adapter.image_selector == 'img[class*="menu-image__MainImage"]'
        assert adapter.blocked_resource_types == frozenset({"font", "stylesheet"})
        assert len(adapter.next_control_selectors) > 1

    def test_unknown_adapter(self):
        with pytest.raises(ValueError, match="Unknown site adapter"):
            get_site_adapter("weedmaps")
