"""Abstract base class for object storage providers (resource images)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IObjectStorageProvider(ABC):
    """Contract for uploading resource images to public object storage."""

    @abstractmethod
    async def upload_image_from_url(self, image_url: str, resource_id: str) -> str:
        """Download *image_url* and store it under a key derived from *resource_id*.

        Returns
        -------
        str
            The public URL of the stored object.

        Raises
        ------
        reform_hub.utils.errors.ConfigurationError
            If credentials, bucket or public URL are missing.
        reform_hub.utils.errors.StorageError
            If the download or upload fails.
        """

    @abstractmethod
    async def upload_bytes(self, data: bytes, key: str, content_type: str) -> str:
        """Store *data* under *key* and return its public URL."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for log output and error tagging."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when credentials, bucket and public URL are all set."""
