"""Weaviate document store provider over plain HTTP.

Implements IDocumentStoreProvider with an injected ``httpx.AsyncClient``:

* reads go through ``POST /v1/graphql`` with a ``Get`` query assembled by
  :mod:`reform_hub.providers.store.graphql`;
* the schema comes from ``GET /v1/schema`` and is cached for the life of the
  provider, since it only changes on redeploys;
* writes use ``POST /v1/objects`` and ``PATCH /v1/objects/{class}/{id}``.

Every request is capped by ``store_timeout`` (15 s by default).  Timeouts
raise :class:`StoreTimeoutError`; transport failures, non-2xx responses and
GraphQL ``errors`` raise :class:`StoreError`.  The service layer decides
whether to degrade those to empty results.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any
from urllib.parse import urlparse

import httpx

from reform_hub.config.settings import Settings
from reform_hub.interfaces.document_store_provider import IDocumentStoreProvider
from reform_hub.models.where import Bm25Query, HybridQuery, NearTextQuery, WhereFilter
from reform_hub.providers.store.graphql import FALLBACK_FIELDS, build_get_query
from reform_hub.utils.errors import ConfigurationError, StoreError, StoreTimeoutError
from reform_hub.utils.logging import get_logger

_PROVIDER_NAME = "weaviate"
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def parse_endpoint(raw: str) -> str:
    """Normalise a full URL or a bare ``host[:port]`` into ``scheme://host``.

    A bare host is assumed to be served over https.
    """
    text = raw.strip().rstrip("/")
    if not text:
        raise ConfigurationError(
            message="WEAVIATE_URL (or WEAVIATE_HOST) is not set",
            provider_name=_PROVIDER_NAME,
        )
    if _SCHEME_RE.match(text):
        parsed = urlparse(text)
        if parsed.netloc:
            return f"{parsed.scheme.lower()}://{parsed.netloc}"
    return f"https://{text}"


class WeaviateStoreProvider(IDocumentStoreProvider):
    """Document store backed by a Weaviate instance.

    Parameters
    ----------
    settings:
        Supplies the endpoint, API key, OpenAI key and timeouts.
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http_client
        self._timeout = settings.store_timeout
        self._schema_timeout = settings.schema_timeout
        self._schema: dict[str, Any] | None = None
        self._fields_by_class: dict[str, str] = {}
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _base_url(self) -> str:
        return parse_endpoint(self._settings.weaviate_endpoint)

    def _headers(self) -> dict[str, str]:
        if not self._settings.weaviate_api_key:
            raise ConfigurationError(
                message="WEAVIATE_API_KEY is not set",
                provider_name=_PROVIDER_NAME,
            )
        headers = {
            "Authorization": f"Bearer {self._settings.weaviate_api_key}",
            "Content-Type": "application/json",
        }
        if self._settings.openai_api_key:
            headers["X-OpenAI-Api-Key"] = self._settings.openai_api_key
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url()}{path}"
        limit = timeout if timeout is not None else self._timeout
        try:
            response = await asyncio.wait_for(
                self._http.request(
                    method, url, json=json_body, headers=self._headers(), timeout=limit
                ),
                timeout=limit,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise StoreTimeoutError(
                message=f"{method} {path} timed out after {limit:.0f}s",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise StoreError(
                message=f"{method} {path} failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if response.status_code >= 400:
            raise StoreError(
                message=f"{method} {path} returned HTTP {response.status_code}",
                provider_name=_PROVIDER_NAME,
            )
        return response

    def _json_object(self, response: httpx.Response, path: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreError(
                message=f"{path} returned a non-JSON body",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise StoreError(
                message=f"{path} returned {type(payload).__name__}, expected an object",
                provider_name=_PROVIDER_NAME,
            )
        return payload

    async def _fields_for(self, collection: str) -> str:
        if collection in self._fields_by_class:
            return self._fields_by_class[collection]
        try:
            schema = await self.get_schema()
        except StoreError as exc:
            self._logger.warning("schema_fetch_failed", collection=collection, error=str(exc))
            return FALLBACK_FIELDS
        fields = ""
        for cls in schema.get("classes") or []:
            if cls.get("class") == collection:
                fields = " ".join(p["name"] for p in cls.get("properties") or [] if p.get("name"))
                break
        self._fields_by_class[collection] = fields or FALLBACK_FIELDS
        return self._fields_by_class[collection]

    # ------------------------------------------------------------------
    # IDocumentStoreProvider implementation
    # ------------------------------------------------------------------

    async def get_objects(
        self,
        collection: str,
        fields: str | None = None,
        where: WhereFilter | None = None,
        bm25: Bm25Query | None = None,
        hybrid: HybridQuery | None = None,
        near_text: NearTextQuery | None = None,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        projection = fields or await self._fields_for(collection)
        query = build_get_query(
            collection,
            projection,
            where=where,
            bm25=bm25,
            hybrid=hybrid,
            near_text=near_text,
            limit=limit,
        )
        response = await self._request("POST", "/v1/graphql", json_body={"query": query})
        payload = self._json_object(response, "/v1/graphql")

        errors = payload.get("errors")
        if errors:
            first = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else errors[0]
            raise StoreError(
                message=f"GraphQL error: {first}",
                provider_name=_PROVIDER_NAME,
            )

        items = ((payload.get("data") or {}).get("Get") or {}).get(collection) or []
        self._logger.debug("store_get_objects", collection=collection, count=len(items))
        return list(items)

    async def get_schema(self) -> dict[str, Any]:
        if self._schema is not None:
            return self._schema
        response = await self._request("GET", "/v1/schema", timeout=self._schema_timeout)
        self._schema = self._json_object(response, "/v1/schema")
        return self._schema

    async def create_object(self, collection: str, properties: dict[str, Any]) -> str:
        response = await self._request(
            "POST",
            "/v1/objects",
            json_body={"class": collection, "properties": properties},
        )
        object_id = self._json_object(response, "/v1/objects").get("id")
        if not object_id:
            raise StoreError(
                message="Object created but no id was returned",
                provider_name=_PROVIDER_NAME,
            )
        self._logger.info("store_object_created", collection=collection, object_id=object_id)
        return str(object_id)

    async def patch_object(
        self, collection: str, object_id: str, properties: dict[str, Any]
    ) -> bool:
        await self._request(
            "PATCH",
            f"/v1/objects/{collection}/{object_id}",
            json_body={"class": collection, "properties": properties},
        )
        self._logger.info("store_object_patched", collection=collection, object_id=object_id)
        return True

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return self._settings.has_store_credentials()
