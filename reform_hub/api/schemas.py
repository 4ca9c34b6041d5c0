"""Pydantic request/response schemas for the reformHub API.

Wire names stay camelCase (``resourceId``, ``ogImage``, ``searchType``) so
existing portal frontends keep working; Python code uses snake_case through
an alias generator.  FastAPI serialises ``response_model`` by alias.

Convention: request schemas end with "Request", response schemas end with
"Response".
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from reform_hub.models.filters import FacetSnapshot, SearchFilters
from reform_hub.models.resource import Category, Resource, ThemeSection


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Resource listings
# ---------------------------------------------------------------------------


class ResourceListResponse(BaseModel):
    data: list[Resource]


class SearchResponse(BaseModel):
    """Search results plus facets ranked from this result page."""

    data: list[Resource]
    facets: FacetSnapshot


class SemanticSearchResponse(_CamelModel):
    success: bool = True
    search_type: str
    count: int
    resources: list[Resource]


class ThemeResourcesResponse(BaseModel):
    resources: list[Resource]


class ResourceResponse(BaseModel):
    resource: Resource


class CategoryListResponse(BaseModel):
    data: list[Category]


class StringListResponse(BaseModel):
    data: list[str]


class DashboardResource(Resource):
    """A resource annotated with the dashboard theme it was fetched for."""

    theme_category: str


class DashboardResponse(_CamelModel):
    themes: list[ThemeSection]
    resources: list[DashboardResource]
    total_themes: int
    total_resources: int


# ---------------------------------------------------------------------------
# Contributions & page tools
# ---------------------------------------------------------------------------


class ContributionResponse(BaseModel):
    success: bool = True
    message: str = "Contribution saved successfully for review"
    id: str


class OGImageResponse(_CamelModel):
    og_image: str


class OGImageAsyncRequest(_CamelModel):
    resource_id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class OGImageAsyncResponse(_CamelModel):
    """Always returned with HTTP 200; ``og_image`` is ``None`` on any failure."""

    resource_id: str
    og_image: str | None = None


class ExtractUrlRequest(BaseModel):
    url: str = Field(..., min_length=1)


class ExtractUrlResponse(_CamelModel):
    title: str
    summary: str
    suggested_tags: list[str] = Field(default_factory=list)
    success: bool = True


class UploadToR2Request(_CamelModel):
    image_url: str = Field(..., min_length=1)
    resource_id: str = Field(..., min_length=1)


class UploadToR2Response(_CamelModel):
    success: bool = True
    r2_url: str
    message: str = "Image uploaded to R2 and database updated successfully"


# ---------------------------------------------------------------------------
# WebSocket search
# ---------------------------------------------------------------------------


class SearchSocketRequest(BaseModel):
    """One search request received on ``/ws/search``."""

    request_id: str
    query: str = ""
    filters: SearchFilters | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)


class SearchSocketResponse(BaseModel):
    request_id: str
    resources: list[Resource]
    facets: FacetSnapshot


# ---------------------------------------------------------------------------
# Health & errors
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
