"""Abstract base class for document store providers.

The portal's resources live in a Weaviate instance, but the service layer
only depends on this contract: typed ``where`` trees and search clauses go
in, raw record dicts come out.  Mapping those dicts into domain models is
the result mapper's job, not the provider's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from reform_hub.models.where import Bm25Query, HybridQuery, NearTextQuery, WhereFilter


# Concrete implementation: WeaviateStoreProvider (reform_hub/providers/store/)
# Talks to the Weaviate GraphQL and REST endpoints over httpx.
class IDocumentStoreProvider(ABC):
    """Contract for the document store backing resource search."""

    @abstractmethod
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
        """Fetch up to *limit* raw records from *collection*.

        Parameters
        ----------
        collection:
            Class name in the store, e.g. ``"Docs"``.
        fields:
            GraphQL field projection.  ``None`` lets the provider derive it
            from the schema (falling back to a built-in projection).
        where, bm25, hybrid, near_text:
            Optional filter and search clauses, combined as the store allows.

        Returns
        -------
        list[dict]
            Raw records in the store's response order.

        Raises
        ------
        reform_hub.utils.errors.StoreError
            If the request fails or the response carries GraphQL errors.
        reform_hub.utils.errors.StoreTimeoutError
            If the request exceeds the provider's timeout.
        """

    @abstractmethod
    async def get_schema(self) -> dict[str, Any]:
        """Return the store schema (``{"classes": [...]}``).

        Raises
        ------
        reform_hub.utils.errors.StoreError
            If the schema cannot be fetched.
        """

    @abstractmethod
    async def create_object(self, collection: str, properties: dict[str, Any]) -> str:
        """Insert a record and return its store-assigned identifier."""

    @abstractmethod
    async def patch_object(
        self, collection: str, object_id: str, properties: dict[str, Any]
    ) -> bool:
        """Merge *properties* into an existing record.  Returns ``True`` on success."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for log output and error tagging."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when connection settings are present."""
