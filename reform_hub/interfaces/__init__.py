"""Abstract provider interfaces.

Services depend on these contracts only; concrete adapters live under
``reform_hub.providers`` and are wired together in ``reform_hub.main``.
"""

from reform_hub.interfaces.cache_provider import ICacheProvider
from reform_hub.interfaces.document_store_provider import IDocumentStoreProvider
from reform_hub.interfaces.object_storage_provider import IObjectStorageProvider
from reform_hub.interfaces.page_fetcher import BLOCKED_STATUSES, FetchResult, IPageFetcher

__all__ = [
    "BLOCKED_STATUSES",
    "FetchResult",
    "ICacheProvider",
    "IDocumentStoreProvider",
    "IObjectStorageProvider",
    "IPageFetcher",
]
