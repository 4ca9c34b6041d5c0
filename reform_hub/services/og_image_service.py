"""Open Graph image lookup for resources that ship without an image.

Fetch strategy: a plain httpx request first; when that is blocked (HTTP
401/403/429/503 or a network error) one retry through headless Chromium.
The page's ``og:image`` family of meta tags is then parsed with
BeautifulSoup and resolved against the page URL.

Successful lookups are cached per URL (24 h by default).  Every failure
degrades to ``None``; nothing here raises to the caller.
"""

from __future__ import annotations

import asyncio

from bs4 import BeautifulSoup

from reform_hub.interfaces.cache_provider import ICacheProvider
from reform_hub.interfaces.page_fetcher import IPageFetcher
from reform_hub.models.resource import Resource
from reform_hub.utils.concurrency import throttled_gather
from reform_hub.utils.logging import get_logger
from reform_hub.utils.urls import is_valid_http_url, resolve_against

# Checked in order; ``property`` or ``name`` attribute.
OG_IMAGE_KEYS: tuple[str, ...] = (
    "og:image",
    "og:image:url",
    "twitter:image",
    "twitter:image:src",
)

_CACHE_PREFIX = "og:"

logger = get_logger(__name__)


def extract_og_image(html: str, page_url: str) -> str | None:
    """Return the absolute preview-image URL declared by *html*, or ``None``."""
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as exc:  # bs4 raises assorted parser errors on junk input
        logger.debug("og_parse_failed", url=page_url, error=str(exc))
        return None

    for key in OG_IMAGE_KEYS:
        tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if tag is None:
            continue
        content = tag.get("content")
        if not isinstance(content, str) or not content.strip():
            continue
        resolved = resolve_against(page_url, content)
        if resolved:
            return resolved
    return None


async def fetch_html(
    url: str,
    primary: IPageFetcher,
    fallback: IPageFetcher | None = None,
    timeout: float | None = None,
) -> str | None:
    """Fetch *url* with *primary*, retrying once with *fallback* when blocked."""
    result = await primary.fetch(url, timeout=timeout)
    if result.html is not None:
        return result.html
    if not result.blocked or fallback is None or not fallback.is_available():
        return None

    logger.info(
        "page_fetch_fallback",
        url=url,
        status=result.status,
        fetcher=fallback.get_provider_name(),
    )
    retry = await fallback.fetch(url)
    return retry.html


class OGImageService:
    """Resolves and caches Open Graph preview images.

    Parameters
    ----------
    primary:
        Plain HTTP fetcher.
    fallback:
        Headless-browser fetcher tried once when *primary* is blocked.
    cache:
        URL -> image URL cache (typically a 24 h ``FacetCache``).
    timeout:
        Per-request timeout for the plain fetch.
    concurrency:
        Maximum simultaneous lookups in :meth:`enrich_resources`.
    """

    def __init__(
        self,
        primary: IPageFetcher,
        cache: ICacheProvider,
        fallback: IPageFetcher | None = None,
        timeout: float = 5.0,
        concurrency: int = 5,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._cache = cache
        self._timeout = timeout
        self._concurrency = concurrency
        self._logger = get_logger(__name__)

    async def get_og_image(self, url: str, timeout: float | None = None) -> str | None:
        if not is_valid_http_url(url):
            return None
        url = url.strip()

        cached = await self._cache.get(_CACHE_PREFIX + url)
        if cached is not None:
            return cached

        try:
            html = await fetch_html(
                url,
                self._primary,
                self._fallback,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except Exception as exc:
            self._logger.warning("og_fetch_failed", url=url, error=str(exc))
            return None
        if html is None:
            return None

        image = extract_og_image(html, url)
        if image:
            await self._cache.set(_CACHE_PREFIX + url, image)
            self._logger.debug("og_image_found", url=url, image=image)
        return image

    async def _enrich_one(self, resource: Resource) -> Resource:
        if resource.image or not resource.link_to_original_source:
            return resource
        image = await self.get_og_image(resource.link_to_original_source)
        if not image:
            return resource
        return resource.model_copy(update={"image": image})

    async def enrich_resources(self, resources: list[Resource]) -> list[Resource]:
        """Attach OG images to resources lacking one.  Order is preserved.

        A failed lookup leaves that resource unchanged and never affects the
        others.
        """
        results = await throttled_gather(
            [self._enrich_one(r) for r in resources],
            semaphore=asyncio.Semaphore(self._concurrency),
        )
        enriched: list[Resource] = []
        for original, result in zip(resources, results):
            if isinstance(result, BaseException):
                self._logger.warning(
                    "og_enrich_failed",
                    resource_id=original.id,
                    error=str(result),
                )
                enriched.append(original)
            else:
                enriched.append(result)
        return enriched
