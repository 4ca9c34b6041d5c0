"""Resource queries against the document store.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.  Sits between the API routes and the store provider.
#
#   QueryBuilder   -> decides SAMPLE / BM25 / FILTERED and builds clauses
#   store provider -> executes them, returns raw dicts (or raises StoreError)
#   result_mapper  -> raw dicts -> Resource
#   aggregator     -> facet counts over a bounded sample of raw records
#
# Read paths catch StoreError (timeouts included), log it and return an
# empty result, so a slow or broken store shows up as "no results" rather
# than a 500.  Callers that need to tell the two apart should check the
# logs or /health.  ConfigurationError is not caught: a missing endpoint
# or key propagates to the error middleware.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Callable

from reform_hub.interfaces.document_store_provider import IDocumentStoreProvider
from reform_hub.models.filters import SearchFilters
from reform_hub.models.resource import Category, Resource, ThemeSection
from reform_hub.models.where import (
    Bm25Query,
    HybridQuery,
    NearTextQuery,
    WhereCondition,
    WhereFilter,
    WhereOperator,
    any_of,
    like,
)
from reform_hub.services import aggregator
from reform_hub.services.query_builder import QueryBuilder
from reform_hub.services.result_mapper import map_records
from reform_hub.utils.concurrency import throttled_gather
from reform_hub.utils.errors import ReformHubError, StoreError
from reform_hub.utils.logging import get_logger

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value.strip()))


class SearchService:
    """Read and update operations over the resource collection.

    Parameters
    ----------
    store:
        Document store provider.
    builder:
        Query planner shared across requests.
    collection:
        Store class queried by every read (``Docs``).
    sample_size:
        Number of records fetched for store-wide facet aggregation.
    today:
        Date source for the mapper's missing-date fallback (injectable for tests).
    """

    def __init__(
        self,
        store: IDocumentStoreProvider,
        builder: QueryBuilder,
        collection: str = "Docs",
        sample_size: int = 1000,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._builder = builder
        self._collection = collection
        self._sample_size = sample_size
        self._today = today
        self._logger = get_logger(__name__)

    @property
    def collection(self) -> str:
        return self._collection

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _fetch_raw(self, operation: str, **kwargs: Any) -> list[dict[str, Any]]:
        try:
            return await self._store.get_objects(self._collection, **kwargs)
        except StoreError as exc:
            self._logger.error("store_read_failed", operation=operation, error=str(exc))
            return []

    async def _fetch(self, operation: str, **kwargs: Any) -> list[Resource]:
        items = await self._fetch_raw(operation, **kwargs)
        resources = map_records(items, today=self._today())
        self._logger.debug("store_read", operation=operation, count=len(resources))
        return resources

    async def _sample(self) -> list[dict[str, Any]]:
        return await self._fetch_raw("facet_sample", limit=self._sample_size)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str = "",
        filters: SearchFilters | None = None,
        limit: int | None = None,
    ) -> list[Resource]:
        plan = self._builder.plan(query, filters, limit)
        self._logger.info("search_planned", mode=plan.mode.value, limit=plan.limit)
        return await self._fetch(
            f"search_{plan.mode.value}",
            where=plan.where,
            bm25=plan.bm25,
            limit=plan.limit,
        )

    async def keyword_search(self, query: str, limit: int = 5) -> list[Resource]:
        return await self.search(query, None, limit)

    async def featured(self, limit: int = 5) -> list[Resource]:
        return await self._fetch("featured", limit=limit)

    async def by_theme(self, theme: str, limit: int = 5) -> list[Resource]:
        return await self._fetch("by_theme", where=like("theme", theme), limit=limit)

    async def by_keywords(self, keywords: list[str], limit: int = 20) -> list[Resource]:
        terms = [k.strip() for k in keywords if k and k.strip()]
        if not terms:
            return []
        where: WhereFilter = any_of([like("keywords", f"*{t}*") for t in terms])
        return await self._fetch("by_keywords", where=where, limit=limit)

    async def get_by_id_or_title(self, identifier: str) -> Resource | None:
        """Look a resource up by store UUID, or by best title match otherwise."""
        identifier = identifier.strip()
        if not identifier:
            return None
        if is_uuid(identifier):
            where = WhereCondition(
                path=("id",), operator=WhereOperator.EQUAL, value_text=identifier
            )
            hits = await self._fetch("get_by_id", where=where, limit=1)
        else:
            bm25 = Bm25Query(query=identifier, properties=("source_title",))
            hits = await self._fetch("get_by_title", bm25=bm25, limit=1)
        return hits[0] if hits else None

    async def semantic_search(
        self, topic: str, limit: int = 20, certainty: float = 0.5
    ) -> list[Resource]:
        if not topic or not topic.strip():
            return []
        return await self.concept_search([topic], limit, certainty)

    async def concept_search(
        self, concepts: list[str], limit: int = 20, certainty: float = 0.5
    ) -> list[Resource]:
        terms = tuple(c.strip() for c in concepts if c and c.strip())
        if not terms:
            return []
        near = NearTextQuery(concepts=terms, certainty=certainty)
        return await self._fetch("concept_search", near_text=near, limit=limit)

    async def hybrid_search(
        self,
        topic: str,
        tags: list[str] | None = None,
        limit: int = 20,
        alpha: float = 0.5,
    ) -> list[Resource]:
        """Blend vector and keyword relevance over the topic plus any tags.

        ``alpha`` of ``1.0`` is pure vector search, ``0.0`` pure BM25.
        """
        parts = [p.strip() for p in [topic, *(tags or [])] if p and p.strip()]
        if not parts:
            return []
        hybrid = HybridQuery(query=" ".join(parts), alpha=alpha)
        return await self._fetch("hybrid_search", hybrid=hybrid, limit=limit)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def update_image(self, resource_id: str, image_url: str) -> bool:
        try:
            return await self._store.patch_object(
                self._collection, resource_id, {"image": image_url}
            )
        except StoreError as exc:
            self._logger.error("image_update_failed", resource_id=resource_id, error=str(exc))
            return False

    # ------------------------------------------------------------------
    # Facets over a bounded sample
    # ------------------------------------------------------------------

    async def categories(self, limit: int = aggregator.TOP_CATEGORIES) -> list[Category]:
        return aggregator.count_categories(await self._sample(), limit)

    async def tags(self) -> list[Category]:
        return aggregator.count_tags(await self._sample())

    async def themes(self) -> list[Category]:
        return aggregator.count_themes(await self._sample())

    async def types(self) -> list[str]:
        resources = map_records(await self._sample(), today=self._today())
        return sorted(aggregator.distinct_types(resources))

    async def locations(self) -> list[str]:
        return aggregator.distinct_locations(await self._sample())

    async def dashboard(self, limit_per_theme: int = 2) -> list[ThemeSection]:
        """Every sampled theme with up to *limit_per_theme* resources each."""
        themes = await self.themes()
        if not themes:
            return []
        results = await throttled_gather(
            [self.by_theme(t.name, limit_per_theme) for t in themes]
        )
        sections: list[ThemeSection] = []
        for theme, result in zip(themes, results):
            if isinstance(result, BaseException):
                self._logger.warning("dashboard_theme_failed", theme=theme.name, error=str(result))
                result = []
            sections.append(
                ThemeSection(theme=theme.name, count=theme.count, href=theme.href, resources=result)
            )
        return sections

    async def ping(self) -> bool:
        """Return ``True`` when the store answers a one-record query."""
        try:
            await self._store.get_objects(self._collection, fields="source_title", limit=1)
        except ReformHubError as exc:
            self._logger.warning("store_unreachable", error=str(exc))
            return False
        return True
