"""Page fetchers: plain httpx first, headless Chromium as a fallback."""

from reform_hub.providers.page.browser_fetcher import BrowserPageFetcher
from reform_hub.providers.page.http_fetcher import BROWSER_HEADERS, HttpPageFetcher

__all__ = ["BROWSER_HEADERS", "BrowserPageFetcher", "HttpPageFetcher"]
