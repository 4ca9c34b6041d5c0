"""Abstract base class for web page fetchers.

Two implementations exist: a plain HTTP fetcher and a headless-browser
fetcher used as a fallback when a site blocks non-browser clients.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

# Status codes that usually mean "bot blocked" rather than "page missing".
BLOCKED_STATUSES = frozenset({401, 403, 429, 503})


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a page fetch.

    ``html`` is ``None`` when the page could not be retrieved.  ``blocked``
    is ``True`` when the failure looks like bot protection or a network
    problem, i.e. when a browser fallback is worth trying.
    """

    url: str
    html: str | None
    status: int | None = None
    blocked: bool = False


class IPageFetcher(ABC):
    """Contract for fetching the HTML of a public web page."""

    @abstractmethod
    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        """Fetch *url* and return a :class:`FetchResult`.  Never raises."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for log output."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the fetcher can be used in this environment."""
