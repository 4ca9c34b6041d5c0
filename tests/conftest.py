"""Shared pytest fixtures for the reformHub test suite."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from reform_hub.config.settings import Settings
from reform_hub.interfaces.document_store_provider import IDocumentStoreProvider
from reform_hub.interfaces.page_fetcher import FetchResult, IPageFetcher
from reform_hub.services.query_builder import QueryBuilder
from reform_hub.services.search_service import SearchService

FIXED_TODAY = date(2024, 6, 1)


def make_settings(**overrides: Any) -> Settings:
    """Build a Settings instance that ignores the developer's ``.env``."""
    defaults: dict[str, Any] = {
        "weaviate_url": "",
        "weaviate_host": "",
        "weaviate_api_key": "",
        "openai_api_key": "",
        "cloudflare_account_id": "",
        "cloudflare_access_key_id": "",
        "cloudflare_secret_access_key": "",
        "cloudflare_r2_bucket_name": "",
        "cloudflare_r2_public_url": "",
        "browser_fallback_enabled": False,
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def raw_record(**fields: Any) -> dict[str, Any]:
    """A GraphQL-shaped store object with sensible defaults."""
    record: dict[str, Any] = {
        "source_title": "Bail Reform Report",
        "summary": "Findings on pre-trial detention.",
        "sourceType": "Research Report",
        "sourcePlatform": "Justice Institute",
        "authors": "A. Author",
        "dateOfPublication": "2023-03-15T00:00:00Z",
        "keywords": "bail, pretrial detention",
        "theme": "Courts",
        "subTheme": "Bail",
        "location": "National",
        "linkToOriginalSource": "https://example.org/bail",
        "_additional": {"id": "0b0f5a2e-1c3d-4e5f-8a9b-0c1d2e3f4a5b"},
    }
    record.update(fields)
    return record


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def settings() -> Settings:
    return make_settings(
        weaviate_url="https://store.example.net",
        weaviate_api_key="test-key",
    )


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """A small mixed page of store records."""
    return [
        raw_record(),
        raw_record(
            source_title="Prison Overcrowding",
            sourceType="Journal Article",
            keywords="Prisons, overcrowding, Bail",
            theme="Prisons",
            location="Lagos",
            _additional={"id": "1b0f5a2e-1c3d-4e5f-8a9b-0c1d2e3f4a5b"},
        ),
        raw_record(
            source_title="Court Delays Explained",
            sourceType="Video Documentary",
            keywords=["courts", "delays"],
            theme="Courts",
            location="Abuja",
            _additional={"id": "2b0f5a2e-1c3d-4e5f-8a9b-0c1d2e3f4a5b"},
        ),
    ]


@pytest.fixture
def mock_store(sample_records: list[dict[str, Any]]) -> MagicMock:
    """Document store returning ``sample_records`` for every read."""
    store = MagicMock(spec=IDocumentStoreProvider)
    store.get_objects = AsyncMock(return_value=sample_records)
    store.get_schema = AsyncMock(return_value={"classes": []})
    store.create_object = AsyncMock(return_value="new-object-id")
    store.patch_object = AsyncMock(return_value=True)
    store.get_provider_name.return_value = "weaviate"
    store.is_available.return_value = True
    return store


@pytest.fixture
def search_service(mock_store: MagicMock) -> SearchService:
    return SearchService(
        store=mock_store,
        builder=QueryBuilder(),
        collection="Docs",
        sample_size=50,
        today=lambda: FIXED_TODAY,
    )


class FakeFetcher(IPageFetcher):
    """Page fetcher returning canned results and recording calls."""

    def __init__(
        self,
        results: dict[str, FetchResult] | None = None,
        name: str = "fake",
        available: bool = True,
    ) -> None:
        self.results = results or {}
        self.calls: list[str] = []
        self._name = name
        self._available = available

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        self.calls.append(url)
        return self.results.get(url, FetchResult(url=url, html=None, status=404))

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self._available
