"""Plain HTTP page fetcher using httpx.

Sends browser-like headers because many publisher sites reject obvious
bots.  Responses with a blocked status (401/403/429/503) and transport
errors are reported as ``blocked`` so the caller can retry with a real
browser.
"""

from __future__ import annotations

import httpx
import structlog

from reform_hub.interfaces.page_fetcher import BLOCKED_STATUSES, FetchResult, IPageFetcher

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 10.0
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class HttpPageFetcher(IPageFetcher):
    """Fetches pages with an injected ``httpx.AsyncClient``."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._http = http_client
        self._timeout = timeout

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        try:
            response = await self._http.get(
                url,
                headers=BROWSER_HEADERS,
                timeout=timeout if timeout is not None else self._timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            logger.debug("page_fetch_error", url=url, error=str(exc))
            return FetchResult(url=url, html=None, blocked=True)

        if response.status_code >= 400:
            blocked = response.status_code in BLOCKED_STATUSES
            logger.debug("page_fetch_status", url=url, status=response.status_code, blocked=blocked)
            return FetchResult(url=url, html=None, status=response.status_code, blocked=blocked)

        return FetchResult(url=str(response.url), html=response.text, status=response.status_code)

    def get_provider_name(self) -> str:
        return "httpx"

    def is_available(self) -> bool:
        return True
