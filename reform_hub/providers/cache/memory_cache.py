"""In-memory facet cache using cachetools.TTLCache.

One instance is built per process at startup and stored on ``app.state``;
handlers receive it instead of reaching for module-level dicts.  The clock
is injectable so tests can advance time without sleeping.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

import structlog
from cachetools import LRUCache, TTLCache

from reform_hub.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class FacetCache(ICacheProvider):
    """TTL cache with stale-while-revalidate reads.

    Parameters
    ----------
    ttl:
        Seconds an entry stays fresh.
    clock:
        Monotonic time source shared with the underlying ``TTLCache``.
    max_size:
        Maximum number of entries kept, for both the fresh and the
        last-known maps.  The least recently used key is evicted first.
    """

    def __init__(
        self,
        ttl: float = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
        max_size: int = 1000,
    ) -> None:
        self._ttl = ttl
        self._fresh: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl, timer=clock)
        # Last value stored per key; served while a refresh is running.
        self._last_known: LRUCache[str, Any] = LRUCache(maxsize=max_size)
        self._refreshing: dict[str, asyncio.Task[None]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        value = self._fresh.get(key)
        logger.debug("cache_hit" if value is not None else "cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._fresh[key] = value
        self._last_known[key] = value
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        self._fresh.pop(key, None)
        self._last_known.pop(key, None)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        fresh = self._fresh.get(key)
        if fresh is not None:
            logger.debug("cache_hit", key=key)
            return fresh

        if key in self._last_known:
            logger.debug("cache_stale", key=key)
            self._schedule_refresh(key, loader)
            return self._last_known[key]

        logger.debug("cache_miss", key=key)
        value = await loader()
        await self.set(key, value)
        return value

    # ------------------------------------------------------------------
    # Background refresh
    # ------------------------------------------------------------------

    def refresh_pending(self, key: str) -> bool:
        task = self._refreshing.get(key)
        return task is not None and not task.done()

    async def wait_for_refreshes(self) -> None:
        """Await every in-flight background refresh (used at shutdown and in tests)."""
        tasks = [t for t in self._refreshing.values() if not t.done()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _schedule_refresh(self, key: str, loader: Callable[[], Awaitable[Any]]) -> None:
        if self.refresh_pending(key):
            return
        self._refreshing[key] = asyncio.create_task(self._refresh(key, loader))

    async def _refresh(self, key: str, loader: Callable[[], Awaitable[Any]]) -> None:
        try:
            value = await loader()
        except Exception as exc:
            logger.warning("cache_refresh_failed", key=key, error=str(exc))
            return
        finally:
            self._refreshing.pop(key, None)
        await self.set(key, value)
        logger.debug("cache_refreshed", key=key)
