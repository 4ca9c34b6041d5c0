"""Document store providers."""

from reform_hub.providers.store.weaviate_provider import WeaviateStoreProvider, parse_endpoint

__all__ = ["WeaviateStoreProvider", "parse_endpoint"]
