"""Object storage providers."""

from reform_hub.providers.storage.r2_provider import R2Storage, extension_for, object_key

__all__ = ["R2Storage", "extension_for", "object_key"]
