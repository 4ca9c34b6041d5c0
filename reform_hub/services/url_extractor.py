"""Pre-fill the contribution form from a pasted URL.

Title and summary come from the page's own metadata first (``og:title`` or
``<title>``, then ``og:description`` or ``description``).  When either is
missing, trafilatura extracts the main text and its metadata instead.
Suggested tags are the known tag facet values that appear in the page text.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

import trafilatura
from bs4 import BeautifulSoup

from reform_hub.interfaces.page_fetcher import IPageFetcher
from reform_hub.services.og_image_service import fetch_html
from reform_hub.utils.errors import ScrapeError
from reform_hub.utils.logging import get_logger
from reform_hub.utils.urls import is_valid_http_url

TITLE_MAX = 100
SUMMARY_MAX = 300
MAX_SUGGESTED_TAGS = 5

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtractedPage:
    title: str
    summary: str
    suggested_tags: list[str] = field(default_factory=list)


def _meta_content(soup: BeautifulSoup, *keys: str) -> str:
    for key in keys:
        tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if tag is not None:
            content = tag.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return ""


def _trafilatura_fallback(html: str) -> tuple[str, str]:
    """Return ``(title, main_text)`` from trafilatura, either possibly empty."""
    raw = trafilatura.extract(html, output_format="json", with_metadata=True, include_comments=False)
    if not raw:
        return "", ""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("trafilatura_json_invalid")
        return "", ""
    return (data.get("title") or "").strip(), (data.get("text") or "").strip()


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def suggest_tags(text: str, known_tags: list[str], limit: int = MAX_SUGGESTED_TAGS) -> list[str]:
    """Known tags occurring in *text* as whole words, in *known_tags* order."""
    haystack = text.lower()
    found: list[str] = []
    for tag in known_tags:
        needle = tag.strip().lower()
        if not needle:
            continue
        if re.search(rf"(?<!\w){re.escape(needle)}(?!\w)", haystack):
            found.append(tag.strip())
            if len(found) >= limit:
                break
    return found


def extract_page_metadata(html: str, known_tags: list[str] | None = None) -> ExtractedPage:
    soup = BeautifulSoup(html, "html.parser")
    title = _meta_content(soup, "og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()
    summary = _meta_content(soup, "og:description", "description")

    body_text = ""
    if not title or not summary:
        fallback_title, body_text = _trafilatura_fallback(html)
        title = title or fallback_title
        summary = summary or body_text

    title = _collapse(title)[:TITLE_MAX]
    summary = _collapse(summary)[:SUMMARY_MAX]
    tags = suggest_tags(" ".join([title, summary, body_text]), known_tags or [])
    return ExtractedPage(title=title, summary=summary, suggested_tags=tags)


class UrlExtractor:
    """Fetches a page (with browser fallback) and extracts form fields from it."""

    def __init__(
        self,
        primary: IPageFetcher,
        fallback: IPageFetcher | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def extract(self, url: str, known_tags: list[str] | None = None) -> ExtractedPage:
        """Extract title, summary and suggested tags from *url*.

        Raises
        ------
        ScrapeError
            If *url* is not http(s) or the page cannot be fetched.
        """
        if not is_valid_http_url(url):
            raise ScrapeError(message="A valid http(s) URL is required")
        html = await fetch_html(url.strip(), self._primary, self._fallback, timeout=self._timeout)
        if html is None:
            raise ScrapeError(message="Failed to fetch URL content")
        page = extract_page_metadata(html, known_tags)
        self._logger.info(
            "url_extracted",
            url=url,
            has_title=bool(page.title),
            suggested=len(page.suggested_tags),
        )
        return page
