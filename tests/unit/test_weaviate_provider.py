"""Unit tests for the GraphQL renderer and the Weaviate store provider.

The httpx client is a ``MagicMock`` so no network calls are made.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from reform_hub.models.where import (
    Bm25Query,
    HybridQuery,
    NearTextQuery,
    WhereCondition,
    WhereOperator,
    any_of,
    like,
)
from reform_hub.providers.store.graphql import (
    FALLBACK_FIELDS,
    build_get_query,
    render_value,
    render_where,
)
from reform_hub.providers.store.weaviate_provider import WeaviateStoreProvider, parse_endpoint
from reform_hub.utils.errors import ConfigurationError, StoreError, StoreTimeoutError
from tests.conftest import make_settings


def _response(status: int = 200, payload: Any = None) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status
    response.json.return_value = payload if payload is not None else {}
    return response


def _provider(client: MagicMock, **overrides: Any) -> WeaviateStoreProvider:
    settings = make_settings(
        weaviate_url="https://store.example.net/",
        weaviate_api_key="secret",
        openai_api_key="sk-openai",
        **overrides,
    )
    return WeaviateStoreProvider(settings=settings, http_client=client)


SCHEMA = {
    "classes": [
        {
            "class": "Docs",
            "properties": [{"name": "source_title"}, {"name": "summary"}],
        }
    ]
}


# ======================================================================
# GraphQL rendering
# ======================================================================


class TestRenderer:
    def test_strings_are_escaped(self) -> None:
        assert render_value('say "hi"\n') == '"say \\"hi\\"\\n"'

    def test_where_renders_operator_bare(self) -> None:
        where = any_of([like("theme", "*Courts*"), like("theme", "*Prisons*")])
        rendered = render_where(where)
        assert rendered.startswith("{operator: Or, operands: [")
        assert '{path: ["theme"], operator: Like, valueText: "*Courts*"}' in rendered

    def test_date_condition(self) -> None:
        cond = WhereCondition(
            path=("dateOfPublication",),
            operator=WhereOperator.GREATER_THAN_EQUAL,
            value_date="2023-01-01T00:00:00Z",
        )
        assert render_where(cond) == (
            '{path: ["dateOfPublication"], operator: GreaterThanEqual, '
            'valueDate: "2023-01-01T00:00:00Z"}'
        )

    def test_get_query_with_bm25(self) -> None:
        query = build_get_query(
            "Docs", "source_title", bm25=Bm25Query("bail", ("summary",)), limit=5
        )
        assert query == (
            '{ Get { Docs(limit: 5, bm25: {query: "bail", properties: ["summary"]}) '
            "{ source_title _additional { id score } } } }"
        )

    def test_get_query_near_text_and_hybrid(self) -> None:
        near = build_get_query("Docs", "x", near_text=NearTextQuery(("bail",), 0.7))
        assert 'nearText: {concepts: ["bail"], certainty: 0.7}' in near
        assert "_additional { id certainty }" in near
        hybrid = build_get_query("Docs", "x", hybrid=HybridQuery("bail courts", 0.25))
        assert 'hybrid: {query: "bail courts", alpha: 0.25}' in hybrid

    def test_unrenderable_value(self) -> None:
        with pytest.raises(TypeError):
            render_value(object())


# ======================================================================
# Endpoint parsing
# ======================================================================


class TestParseEndpoint:
    def test_full_url(self) -> None:
        assert parse_endpoint("HTTP://localhost:8080/") == "http://localhost:8080"

    def test_bare_host_assumes_https(self) -> None:
        assert parse_endpoint("cluster.weaviate.network") == "https://cluster.weaviate.network"

    def test_empty_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_endpoint("  ")


# ======================================================================
# Provider
# ======================================================================


class TestGetObjects:
    @pytest.mark.asyncio
    async def test_posts_graphql_with_auth_headers(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(
            side_effect=[
                _response(payload=SCHEMA),
                _response(payload={"data": {"Get": {"Docs": [{"source_title": "A"}]}}}),
            ]
        )
        provider = _provider(client)

        items = await provider.get_objects("Docs", limit=3)

        assert items == [{"source_title": "A"}]
        method, url = client.request.await_args_list[1].args
        kwargs = client.request.await_args_list[1].kwargs
        assert (method, url) == ("POST", "https://store.example.net/v1/graphql")
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["headers"]["X-OpenAI-Api-Key"] == "sk-openai"
        assert "Docs(limit: 3) { source_title summary _additional" in kwargs["json"]["query"]

    @pytest.mark.asyncio
    async def test_schema_is_cached(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(
            side_effect=[
                _response(payload=SCHEMA),
                _response(payload={"data": {"Get": {"Docs": []}}}),
                _response(payload={"data": {"Get": {"Docs": []}}}),
            ]
        )
        provider = _provider(client)
        await provider.get_objects("Docs")
        await provider.get_objects("Docs")
        assert client.request.await_count == 3

    @pytest.mark.asyncio
    async def test_schema_failure_uses_fallback_projection(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(
            side_effect=[
                _response(status=500),
                _response(payload={"data": {"Get": {"Docs": []}}}),
            ]
        )
        provider = _provider(client)
        assert await provider.get_objects("Docs") == []
        query = client.request.await_args_list[1].kwargs["json"]["query"]
        assert FALLBACK_FIELDS in query

    @pytest.mark.asyncio
    async def test_graphql_errors_raise_store_error(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(
            return_value=_response(payload={"errors": [{"message": "bad where"}]})
        )
        provider = _provider(client)
        with pytest.raises(StoreError, match="bad where"):
            await provider.get_objects("Docs", fields="source_title")

    @pytest.mark.asyncio
    async def test_html_body_raises_store_error(self) -> None:
        html = httpx.Response(
            200,
            text="<html>proxy</html>",
            request=httpx.Request("POST", "https://store.example.net/v1/graphql"),
        )
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(return_value=html)
        provider = _provider(client)
        with pytest.raises(StoreError, match="non-JSON"):
            await provider.get_objects("Docs", fields="source_title")

    @pytest.mark.asyncio
    async def test_html_schema_falls_back_to_default_projection(self) -> None:
        html = httpx.Response(
            200,
            text="<html>captive portal</html>",
            request=httpx.Request("GET", "https://store.example.net/v1/schema"),
        )
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(
            side_effect=[html, _response(payload={"data": {"Get": {"Docs": []}}})]
        )
        provider = _provider(client)
        assert await provider.get_objects("Docs") == []
        query = client.request.await_args_list[1].kwargs["json"]["query"]
        assert FALLBACK_FIELDS in query

    @pytest.mark.asyncio
    async def test_non_object_payload_raises_store_error(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(return_value=_response(payload=["unexpected"]))
        provider = _provider(client)
        with pytest.raises(StoreError, match="expected an object"):
            await provider.get_objects("Docs", fields="source_title")

    @pytest.mark.asyncio
    async def test_transport_error_raises_store_error(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(side_effect=httpx.ConnectError("refused"))
        provider = _provider(client)
        with pytest.raises(StoreError):
            await provider.get_objects("Docs", fields="source_title")

    @pytest.mark.asyncio
    async def test_slow_store_raises_timeout(self) -> None:
        async def _slow(*args: Any, **kwargs: Any) -> MagicMock:
            await asyncio.sleep(1)
            return _response()

        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(side_effect=_slow)
        provider = _provider(client, store_timeout=0.01)
        with pytest.raises(StoreTimeoutError):
            await provider.get_objects("Docs", fields="source_title")

    @pytest.mark.asyncio
    async def test_missing_api_key_is_configuration_error(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock()
        provider = WeaviateStoreProvider(
            settings=make_settings(weaviate_url="https://store.example.net"),
            http_client=client,
        )
        with pytest.raises(ConfigurationError):
            await provider.get_objects("Docs", fields="source_title")
        client.request.assert_not_awaited()
        assert not provider.is_available()


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_object_returns_id(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(return_value=_response(payload={"id": "new-id"}))
        provider = _provider(client)

        object_id = await provider.create_object("DocsWithImages", {"source_title": "T"})

        assert object_id == "new-id"
        kwargs = client.request.await_args.kwargs
        assert kwargs["json"] == {"class": "DocsWithImages", "properties": {"source_title": "T"}}

    @pytest.mark.asyncio
    async def test_create_object_without_id_raises(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(return_value=_response(payload={}))
        with pytest.raises(StoreError):
            await _provider(client).create_object("DocsWithImages", {})

    @pytest.mark.asyncio
    async def test_patch_object(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(return_value=_response(status=204))
        provider = _provider(client)

        assert await provider.patch_object("Docs", "abc", {"image": "https://i"}) is True
        method, url = client.request.await_args.args
        assert (method, url) == ("PATCH", "https://store.example.net/v1/objects/Docs/abc")

    @pytest.mark.asyncio
    async def test_patch_not_found_raises(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.request = AsyncMock(return_value=_response(status=404))
        with pytest.raises(StoreError):
            await _provider(client).patch_object("Docs", "missing", {})
