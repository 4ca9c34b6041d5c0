"""Headless-browser page fetcher using Playwright (Chromium).

Used only as a fallback when the plain HTTP fetch is blocked.  Each fetch
launches a short-lived browser; the fallback path is rare enough that a
pooled browser is not worth the memory it would pin.  Any Playwright
failure (missing browser binaries included) degrades to an empty result.
"""

from __future__ import annotations

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from reform_hub.interfaces.page_fetcher import FetchResult, IPageFetcher
from reform_hub.providers.page.http_fetcher import BROWSER_HEADERS
from reform_hub.utils.logging import get_logger

_DEFAULT_TIMEOUT = 12.0
_LAUNCH_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]


class BrowserPageFetcher(IPageFetcher):
    """Renders pages in headless Chromium and returns the resulting DOM."""

    def __init__(self, enabled: bool = True, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._enabled = enabled
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        if not self._enabled:
            return FetchResult(url=url, html=None)

        timeout_ms = int((timeout if timeout is not None else self._timeout) * 1000)
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True, args=_LAUNCH_ARGS)
                try:
                    page = await browser.new_page(user_agent=BROWSER_HEADERS["User-Agent"])
                    page.set_default_timeout(timeout_ms)
                    response = await page.goto(url, wait_until="domcontentloaded")
                    html = await page.content()
                    status = response.status if response is not None else None
                    final_url = page.url
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            self._logger.warning("browser_fetch_failed", url=url, error=str(exc))
            return FetchResult(url=url, html=None)

        self._logger.info("browser_fetch_complete", url=url, status=status)
        return FetchResult(url=final_url or url, html=html, status=status)

    def get_provider_name(self) -> str:
        return "playwright"

    def is_available(self) -> bool:
        return self._enabled
