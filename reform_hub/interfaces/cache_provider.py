"""Abstract base class for cache service providers.

Defines the contract for the process-wide caches used by the API layer
(facet lists, OG image lookups).  Implementations may keep entries in
memory or in a shared store such as Redis; handlers only see this
interface, obtained from ``app.state``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable


class ICacheProvider(ABC):
    """Contract for key-value cache services with stale-while-revalidate reads.

    All operations are async to allow for network-backed stores without
    blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the fresh value stored under *key*, or ``None``.

        Expired entries are never returned by this method, even when a
        stale copy is still held for :meth:`get_or_load`.
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* using the provider's TTL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key* (no-op if absent)."""

    @abstractmethod
    async def get_or_load(
        self, key: str, loader: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Return the cached value for *key*, loading it on a miss.

        Parameters
        ----------
        key:
            The cache key.
        loader:
            Zero-argument coroutine factory producing the value.

        Returns
        -------
        Any
            A fresh value when one is cached.  When the entry has expired
            but a last-known value exists, that stale value is returned
            immediately and a single background refresh is scheduled.  On a
            full miss the loader is awaited and its result stored.
        """
