"""reformHub FastAPI application entry point.

Wires providers, services and routes together.  Configuration comes from
``.env`` / environment variables (Settings) and ``config/config.yaml``;
structured logging is configured before anything else logs.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from reform_hub.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from reform_hub.api.routes import health_router
from reform_hub.api.routes import router as api_router
from reform_hub.api.websocket import websocket_search
from reform_hub.config.loader import load_config
from reform_hub.config.settings import Settings
from reform_hub.providers.cache.memory_cache import FacetCache
from reform_hub.providers.page.browser_fetcher import BrowserPageFetcher
from reform_hub.providers.page.http_fetcher import HttpPageFetcher
from reform_hub.providers.storage.r2_provider import R2Storage
from reform_hub.providers.store.weaviate_provider import WeaviateStoreProvider
from reform_hub.services.contribution_service import ContributionService
from reform_hub.services.og_image_service import OGImageService
from reform_hub.services.query_builder import QueryBuilder
from reform_hub.services.search_service import SearchService
from reform_hub.services.url_extractor import UrlExtractor
from reform_hub.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)

_APP_VERSION = str(config.get("app", {}).get("version", "0.1.0"))


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service the routes read from ``app.state``."""
    http_client = httpx.AsyncClient(timeout=30.0)

    store = WeaviateStoreProvider(settings=app_settings, http_client=http_client)
    storage = R2Storage(settings=app_settings, http_client=http_client)
    http_fetcher = HttpPageFetcher(http_client=http_client, timeout=app_settings.page_fetch_timeout)
    browser_fetcher = BrowserPageFetcher(enabled=app_settings.browser_fallback_enabled)

    facet_cache = FacetCache(ttl=app_settings.facet_cache_ttl)
    og_cache = FacetCache(ttl=app_settings.og_cache_ttl, max_size=5000)

    builder = QueryBuilder.from_config(app_config)
    search_service = SearchService(
        store=store,
        builder=builder,
        collection=app_settings.weaviate_collection,
        sample_size=app_settings.facet_sample_size,
    )
    og_image_service = OGImageService(
        primary=http_fetcher,
        fallback=browser_fetcher,
        cache=og_cache,
        timeout=app_settings.og_fetch_timeout,
        concurrency=int(app_config.get("og_image", {}).get("enrich_concurrency", 5)),
    )
    contribution_service = ContributionService(
        store=store,
        collection=app_settings.contribution_collection,
    )
    url_extractor = UrlExtractor(
        primary=http_fetcher,
        fallback=browser_fetcher,
        timeout=app_settings.page_fetch_timeout,
    )

    return {
        "http_client": http_client,
        "store": store,
        "object_storage": storage,
        "facet_cache": facet_cache,
        "og_cache": og_cache,
        "search_service": search_service,
        "og_image_service": og_image_service,
        "contribution_service": contribution_service,
        "url_extractor": url_extractor,
        "settings": app_settings,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=_APP_VERSION,
        environment=settings.app_env,
        store_configured=settings.has_store_credentials(),
        storage_configured=components["object_storage"].is_available(),
    )

    yield

    await components["facet_cache"].wait_for_refreshes()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="reformHub API",
        version=_APP_VERSION,
        description=(
            "Search, browse and contribute criminal-justice reform resources: "
            "reports, articles, judgments, videos and podcasts."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- Routes --
    application.include_router(api_router)
    application.include_router(health_router)

    # -- WebSocket --
    @application.websocket("/ws/search")
    async def ws_search(websocket: WebSocket) -> None:
        await websocket_search(websocket)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "reform_hub.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
