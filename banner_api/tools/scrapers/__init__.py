"""Banner scraping tools"""

from .banner_scraper import BannerScraper
from .browser_session import BrowserSession
from .site_adapters import DutchieSiteAdapter, get_site_adapter

__all__ = [
    "BannerScraper",
    "BrowserSession",
    "DutchieSiteAdapter",
    "get_site_adapter",
]
