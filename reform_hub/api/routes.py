"""FastAPI routes for the reformHub portal.

Service dependencies are resolved from ``app.state`` via ``Depends`` using
the ``Annotated`` pattern; ``main._build_all`` populates the state at
startup.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                     Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/search                  GET     Keyword / filtered search + facets
# /api/semantic-search         GET     hybrid | semantic | concepts search
# /api/featured                GET     Unranked sample (optional OG images)
# /api/categories              GET     Top theme/subTheme/keyword categories
# /api/themes                  GET     Themes with counts
# /api/tags                    GET     Tags with counts          (cached)
# /api/types                   GET     Display types             (cached)
# /api/locations               GET     Distinct locations        (cached)
# /api/theme-resources         GET     Resources for one theme
# /api/resources-by-keywords   GET     Resources matching any keyword
# /api/resource/{id}           GET     One resource by UUID or title
# /api/dashboard               GET     Themes with sample resources
# /api/contribute              POST    Queue a visitor contribution
# /api/og-image                GET     OG image for a page URL
# /api/og-image-async          POST    OG image for a resource, never fails
# /api/extract-url             POST    Title/summary/tags from a page URL
# /api/upload-to-r2            POST    Mirror a resource image to R2
# /health                      GET     Store reachability
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from reform_hub.api.schemas import (
    CategoryListResponse,
    ContributionResponse,
    DashboardResource,
    DashboardResponse,
    ErrorResponse,
    ExtractUrlRequest,
    ExtractUrlResponse,
    HealthResponse,
    OGImageAsyncRequest,
    OGImageAsyncResponse,
    OGImageResponse,
    ResourceListResponse,
    ResourceResponse,
    SearchResponse,
    SemanticSearchResponse,
    StringListResponse,
    ThemeResourcesResponse,
    UploadToR2Request,
    UploadToR2Response,
)
from reform_hub.config.settings import Settings
from reform_hub.interfaces.cache_provider import ICacheProvider
from reform_hub.interfaces.object_storage_provider import IObjectStorageProvider
from reform_hub.models.contribution import Contribution
from reform_hub.models.filters import DateRange, SearchFilters
from reform_hub.services.aggregator import FacetSession
from reform_hub.services.contribution_service import ContributionService
from reform_hub.services.og_image_service import OGImageService
from reform_hub.services.search_service import SearchService
from reform_hub.services.url_extractor import UrlExtractor
from reform_hub.utils.errors import ContributionError, ScrapeError
from reform_hub.utils.logging import get_logger
from reform_hub.utils.urls import is_valid_http_url

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")
health_router = APIRouter()

_SEARCH_TYPES = frozenset({"hybrid", "semantic", "concepts"})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service


def _get_facet_cache(request: Request) -> ICacheProvider:
    return request.app.state.facet_cache


def _get_og_image_service(request: Request) -> OGImageService:
    return request.app.state.og_image_service


def _get_contribution_service(request: Request) -> ContributionService:
    return request.app.state.contribution_service


def _get_url_extractor(request: Request) -> UrlExtractor:
    return request.app.state.url_extractor


def _get_object_storage(request: Request) -> IObjectStorageProvider:
    return request.app.state.object_storage


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


SearchServiceDep = Annotated[SearchService, Depends(_get_search_service)]
FacetCacheDep = Annotated[ICacheProvider, Depends(_get_facet_cache)]
OGImageServiceDep = Annotated[OGImageService, Depends(_get_og_image_service)]
ContributionServiceDep = Annotated[ContributionService, Depends(_get_contribution_service)]
UrlExtractorDep = Annotated[UrlExtractor, Depends(_get_url_extractor)]
ObjectStorageDep = Annotated[IObjectStorageProvider, Depends(_get_object_storage)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


def _build_filters(
    types: list[str],
    themes: list[str],
    sources: list[str],
    authors: list[str],
    locations: list[str],
    date_from: str | None,
    date_to: str | None,
) -> SearchFilters:
    try:
        date_range = DateRange(**{"from": date_from, "to": date_to})
        return SearchFilters(
            types=types,
            themes=themes,
            sources=sources,
            authors=authors,
            locations=locations,
            date_range=None if date_range.is_empty() else date_range,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid date filter") from exc


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@router.get("/search", response_model=SearchResponse, summary="Search resources")
async def search(
    service: SearchServiceDep,
    query: str = "",
    limit: Annotated[int, Query(ge=1, le=1000)] = 20,
    source_types: Annotated[list[str] | None, Query(alias="sourceTypes")] = None,
    types: Annotated[list[str] | None, Query()] = None,
    themes: Annotated[list[str] | None, Query()] = None,
    sources: Annotated[list[str] | None, Query()] = None,
    authors: Annotated[list[str] | None, Query()] = None,
    locations: Annotated[list[str] | None, Query()] = None,
    date_from: Annotated[str | None, Query(alias="from")] = None,
    date_to: Annotated[str | None, Query(alias="to")] = None,
) -> SearchResponse:
    """Keyword search, or substring-filtered search when any filter is given.

    Facets are ranked from this page of results only.
    """
    filters = _build_filters(
        [*(source_types or []), *(types or [])],
        themes or [],
        sources or [],
        authors or [],
        locations or [],
        date_from,
        date_to,
    )
    resources = await service.search(query, filters, limit)
    return SearchResponse(data=resources, facets=FacetSession().update(resources))


@router.get(
    "/semantic-search",
    response_model=SemanticSearchResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Vector, concept or hybrid search",
)
async def semantic_search(
    service: SearchServiceDep,
    topic: str = "",
    tags: Annotated[list[str] | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 20,
    search_type: Annotated[str, Query(alias="type")] = "hybrid",
    alpha: Annotated[float, Query(ge=0.0, le=1.0)] = 0.5,
    certainty: Annotated[float, Query(ge=0.0, le=1.0)] = 0.5,
) -> SemanticSearchResponse:
    if search_type not in _SEARCH_TYPES:
        search_type = "hybrid"
    tag_list = tags or []

    if search_type == "semantic":
        resources = await service.semantic_search(topic, limit, certainty)
    elif search_type == "concepts":
        resources = await service.concept_search([topic, *tag_list], limit, certainty)
    else:
        resources = await service.hybrid_search(topic, tag_list, limit, alpha)

    _logger.info("semantic_search", search_type=search_type, topic=topic, count=len(resources))
    return SemanticSearchResponse(search_type=search_type, count=len(resources), resources=resources)


@router.get("/featured", response_model=ResourceListResponse)
async def featured(
    service: SearchServiceDep,
    og_service: OGImageServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
    enrich_images: Annotated[bool, Query(alias="enrichImages")] = False,
) -> ResourceListResponse:
    """Unranked sample; with ``enrichImages`` missing images come from OG tags."""
    resources = await service.featured(limit)
    if enrich_images:
        resources = await og_service.enrich_resources(resources)
    return ResourceListResponse(data=resources)


@router.get(
    "/theme-resources",
    response_model=ThemeResourcesResponse,
    responses={400: {"model": ErrorResponse}},
)
async def theme_resources(
    service: SearchServiceDep,
    theme: str = "",
    limit: Annotated[int, Query(ge=1, le=1000)] = 10,
) -> ThemeResourcesResponse:
    if not theme.strip():
        raise HTTPException(status_code=400, detail="Theme parameter is required")
    return ThemeResourcesResponse(resources=await service.by_theme(theme, limit))


@router.get(
    "/resources-by-keywords",
    response_model=ResourceListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def resources_by_keywords(
    service: SearchServiceDep,
    keywords: str = "",
    limit: Annotated[int, Query(ge=1, le=1000)] = 20,
) -> ResourceListResponse:
    terms = [k.strip() for k in keywords.split(",") if k.strip()]
    if not terms:
        raise HTTPException(status_code=400, detail="At least one keyword is required")
    return ResourceListResponse(data=await service.by_keywords(terms, limit))


@router.get(
    "/resource/{identifier}",
    response_model=ResourceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_resource(identifier: str, service: SearchServiceDep) -> ResourceResponse:
    resource = await service.get_by_id_or_title(identifier)
    if resource is None:
        raise HTTPException(status_code=404, detail="Resource not found")
    return ResourceResponse(resource=resource)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    service: SearchServiceDep,
    limit_per_theme: Annotated[int, Query(alias="limitPerTheme", ge=1, le=50)] = 2,
) -> DashboardResponse:
    sections = await service.dashboard(limit_per_theme)
    flat = [
        DashboardResource(**r.model_dump(), theme_category=s.theme)
        for s in sections
        for r in s.resources
    ]
    return DashboardResponse(
        themes=sections,
        resources=flat,
        total_themes=len(sections),
        total_resources=len(flat),
    )


# ---------------------------------------------------------------------------
# Facets
# ---------------------------------------------------------------------------


@router.get("/categories", response_model=CategoryListResponse)
async def categories(service: SearchServiceDep) -> CategoryListResponse:
    return CategoryListResponse(data=await service.categories())


@router.get("/themes", response_model=CategoryListResponse)
async def themes(service: SearchServiceDep) -> CategoryListResponse:
    return CategoryListResponse(data=await service.themes())


@router.get("/tags", response_model=CategoryListResponse)
async def tags(service: SearchServiceDep, cache: FacetCacheDep) -> CategoryListResponse:
    return CategoryListResponse(data=await cache.get_or_load("tags", service.tags))


@router.get("/types", response_model=StringListResponse)
async def types(service: SearchServiceDep, cache: FacetCacheDep) -> StringListResponse:
    return StringListResponse(data=await cache.get_or_load("types", service.types))


@router.get("/locations", response_model=StringListResponse)
async def locations(service: SearchServiceDep, cache: FacetCacheDep) -> StringListResponse:
    return StringListResponse(data=await cache.get_or_load("locations", service.locations))


# ---------------------------------------------------------------------------
# Contributions & page tools
# ---------------------------------------------------------------------------


@router.post(
    "/contribute",
    response_model=ContributionResponse,
    responses={400: {"model": ErrorResponse}},
)
async def contribute(
    contribution: Contribution,
    service: ContributionServiceDep,
) -> ContributionResponse:
    try:
        object_id = await service.submit(contribution)
    except ContributionError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    return ContributionResponse(id=object_id)


@router.get(
    "/og-image",
    response_model=OGImageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def og_image(
    service: OGImageServiceDep,
    settings: SettingsDep,
    url: str = "",
) -> OGImageResponse:
    if not is_valid_http_url(url):
        raise HTTPException(status_code=400, detail="Invalid URL")
    image = await service.get_og_image(url, timeout=settings.page_fetch_timeout)
    if image is None:
        raise HTTPException(status_code=404, detail="No OG image found")
    return OGImageResponse(og_image=image)


@router.post("/og-image-async", response_model=OGImageAsyncResponse)
async def og_image_async(
    body: OGImageAsyncRequest,
    service: OGImageServiceDep,
) -> OGImageAsyncResponse:
    image = await service.get_og_image(body.url)
    return OGImageAsyncResponse(resource_id=body.resource_id, og_image=image)


@router.post(
    "/extract-url",
    response_model=ExtractUrlResponse,
    responses={400: {"model": ErrorResponse}},
)
async def extract_url(
    body: ExtractUrlRequest,
    extractor: UrlExtractorDep,
    service: SearchServiceDep,
    cache: FacetCacheDep,
) -> ExtractUrlResponse:
    known = await cache.get_or_load("tags", service.tags)
    try:
        page = await extractor.extract(body.url, [c.name for c in known])
    except ScrapeError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    return ExtractUrlResponse(
        title=page.title,
        summary=page.summary,
        suggested_tags=page.suggested_tags,
    )


@router.post(
    "/upload-to-r2",
    response_model=UploadToR2Response,
    responses={500: {"model": ErrorResponse}},
)
async def upload_to_r2(
    body: UploadToR2Request,
    storage: ObjectStorageDep,
    service: SearchServiceDep,
) -> UploadToR2Response:
    r2_url = await storage.upload_image_from_url(body.image_url, body.resource_id)
    if not await service.update_image(body.resource_id, r2_url):
        raise HTTPException(status_code=500, detail="Failed to update resource with R2 URL")
    return UploadToR2Response(r2_url=r2_url)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request, service: SearchServiceDep) -> HealthResponse:
    settings: Settings = request.app.state.settings
    store_ok = await service.ping()
    providers: dict[str, Any] = {
        "weaviate": store_ok,
        "r2": request.app.state.object_storage.is_available(),
        "playwright": settings.browser_fallback_enabled,
    }
    return HealthResponse(
        status="healthy" if store_ok else "degraded",
        version=request.app.version,
        providers=providers,
    )
