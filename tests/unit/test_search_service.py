"""Unit tests for SearchService against a mocked document store."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from reform_hub.models.filters import SearchFilters
from reform_hub.models.where import (
    Bm25Query,
    HybridQuery,
    NearTextQuery,
    WhereCondition,
    WhereLogical,
    WhereOperator,
)
from reform_hub.services.search_service import SearchService, is_uuid
from reform_hub.utils.errors import ConfigurationError, StoreError, StoreTimeoutError

UUID = "0b0f5a2e-1c3d-4e5f-8a9b-0c1d2e3f4a5b"


def _kwargs(store: MagicMock) -> dict:
    return store.get_objects.await_args.kwargs


class TestSearch:
    @pytest.mark.asyncio
    async def test_bm25_search(self, search_service: SearchService, mock_store: MagicMock) -> None:
        resources = await search_service.search("bail", None, 10)

        assert len(resources) == 3
        assert resources[0].featured and not resources[1].featured
        args = mock_store.get_objects.await_args
        assert args.args == ("Docs",)
        assert args.kwargs["bm25"] == Bm25Query(
            "bail", ("source_title", "summary", "keywords")
        )
        assert args.kwargs["where"] is None
        assert args.kwargs["limit"] == 10

    @pytest.mark.asyncio
    async def test_filtered_search(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.search("", SearchFilters(themes=["Courts"]))
        where = _kwargs(mock_store)["where"]
        assert isinstance(where, WhereCondition)
        assert where.value_text == "*Courts*"
        assert _kwargs(mock_store)["limit"] == 20

    @pytest.mark.asyncio
    async def test_store_error_degrades_to_empty(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        mock_store.get_objects.side_effect = StoreTimeoutError()
        assert await search_service.search("bail") == []

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        mock_store.get_objects.side_effect = ConfigurationError("no key")
        with pytest.raises(ConfigurationError):
            await search_service.search("bail")

    @pytest.mark.asyncio
    async def test_keyword_search_defaults_to_five(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.keyword_search("bail")
        assert _kwargs(mock_store)["limit"] == 5


class TestLookups:
    @pytest.mark.asyncio
    async def test_by_theme_uses_raw_theme(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.by_theme("Courts", 4)
        where = _kwargs(mock_store)["where"]
        assert where.path == ("theme",) and where.value_text == "Courts"

    @pytest.mark.asyncio
    async def test_by_keywords_or_of_wildcards(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.by_keywords(["bail", " ", "remand"])
        where = _kwargs(mock_store)["where"]
        assert isinstance(where, WhereLogical) and where.operator is WhereOperator.OR
        assert [o.value_text for o in where.operands] == ["*bail*", "*remand*"]

    @pytest.mark.asyncio
    async def test_by_keywords_empty_skips_store(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        assert await search_service.by_keywords([" "]) == []
        mock_store.get_objects.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_by_uuid(self, search_service: SearchService, mock_store: MagicMock) -> None:
        resource = await search_service.get_by_id_or_title(UUID)
        assert resource is not None
        where = _kwargs(mock_store)["where"]
        assert where.operator is WhereOperator.EQUAL and where.path == ("id",)
        assert _kwargs(mock_store)["limit"] == 1

    @pytest.mark.asyncio
    async def test_get_by_title_uses_bm25(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.get_by_id_or_title("Bail Reform Report")
        assert _kwargs(mock_store)["bm25"] == Bm25Query("Bail Reform Report", ("source_title",))

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        mock_store.get_objects.return_value = []
        assert await search_service.get_by_id_or_title("nothing") is None
        assert await search_service.get_by_id_or_title("  ") is None

    def test_is_uuid(self) -> None:
        assert is_uuid(UUID)
        assert not is_uuid("bail-report")


class TestVectorSearch:
    @pytest.mark.asyncio
    async def test_semantic_search(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.semantic_search("prison reform", 7, 0.6)
        assert _kwargs(mock_store)["near_text"] == NearTextQuery(("prison reform",), 0.6)

    @pytest.mark.asyncio
    async def test_semantic_search_blank_topic(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        assert await search_service.semantic_search("  ") == []
        mock_store.get_objects.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hybrid_joins_topic_and_tags(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.hybrid_search("bail", ["remand", ""], alpha=0.3)
        assert _kwargs(mock_store)["hybrid"] == HybridQuery("bail remand", 0.3)


class TestFacetsAndDashboard:
    @pytest.mark.asyncio
    async def test_sample_uses_sample_size(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        await search_service.tags()
        assert _kwargs(mock_store) == {"limit": 50}

    @pytest.mark.asyncio
    async def test_themes(self, search_service: SearchService) -> None:
        themes = await search_service.themes()
        assert [(c.name, c.count) for c in themes] == [("Courts", 2), ("Prisons", 1)]

    @pytest.mark.asyncio
    async def test_types_sorted_display_types(self, search_service: SearchService) -> None:
        assert await search_service.types() == ["Article", "Report", "Video"]

    @pytest.mark.asyncio
    async def test_locations(self, search_service: SearchService) -> None:
        assert await search_service.locations() == ["Abuja", "Lagos", "National"]

    @pytest.mark.asyncio
    async def test_categories_limit(self, search_service: SearchService) -> None:
        assert len(await search_service.categories(limit=2)) == 2

    @pytest.mark.asyncio
    async def test_dashboard_sections(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        sections = await search_service.dashboard(limit_per_theme=2)
        assert [s.theme for s in sections] == ["Courts", "Prisons"]
        assert sections[0].count == 2
        assert sections[0].href == "/tag/courts"
        # One sample read plus one read per theme.
        assert mock_store.get_objects.await_count == 3

    @pytest.mark.asyncio
    async def test_dashboard_empty_store(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        mock_store.get_objects.return_value = []
        assert await search_service.dashboard() == []


class TestMutationsAndPing:
    @pytest.mark.asyncio
    async def test_update_image(self, search_service: SearchService, mock_store: MagicMock) -> None:
        assert await search_service.update_image("abc", "https://img")
        mock_store.patch_object.assert_awaited_once_with("Docs", "abc", {"image": "https://img"})

    @pytest.mark.asyncio
    async def test_update_image_failure(
        self, search_service: SearchService, mock_store: MagicMock
    ) -> None:
        mock_store.patch_object = AsyncMock(side_effect=StoreError("nope"))
        assert await search_service.update_image("abc", "https://img") is False

    @pytest.mark.asyncio
    async def test_ping(self, search_service: SearchService, mock_store: MagicMock) -> None:
        assert await search_service.ping()
        mock_store.get_objects.side_effect = ConfigurationError()
        assert not await search_service.ping()
