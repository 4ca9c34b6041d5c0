"""Utility modules for reformHub.

- **errors** -- exception hierarchy rooted at ReformHubError.
- **logging** -- structlog setup with console/JSON dual rendering.
- **concurrency** -- semaphore-bounded ``asyncio.gather``.
- **urls** (not re-exported here) -- http(s) validation and relative URL
  resolution shared by the mapper and the page scrapers.
"""

from reform_hub.utils.concurrency import throttled_gather
from reform_hub.utils.errors import (
    ConfigurationError,
    ContributionError,
    ReformHubError,
    ScrapeError,
    StorageError,
    StoreError,
    StoreTimeoutError,
)
from reform_hub.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ContributionError",
    "ReformHubError",
    "ScrapeError",
    "StorageError",
    "StoreError",
    "StoreTimeoutError",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
