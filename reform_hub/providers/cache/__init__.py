"""Cache providers.

FacetCache is process-local.  For multi-worker deployments, swap in a
Redis adapter implementing ICacheProvider without changing any handler.
"""

from reform_hub.providers.cache.memory_cache import FacetCache

__all__ = ["FacetCache"]
