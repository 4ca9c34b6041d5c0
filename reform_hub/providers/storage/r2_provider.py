"""Cloudflare R2 image storage via the S3-compatible API (boto3).

boto3 is synchronous, so every client call is offloaded with
``asyncio.to_thread``.  The client is created lazily on first upload; a
missing credential, bucket or public URL raises ``ConfigurationError`` at
that point rather than at startup.

Object keys are deterministic (``resources/{resource_id}.{ext}``), so
re-uploading the image for a resource overwrites the previous object
instead of leaving orphans behind.
"""

from __future__ import annotations

import asyncio
from typing import Any

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError

from reform_hub.config.settings import Settings
from reform_hub.interfaces.object_storage_provider import IObjectStorageProvider
from reform_hub.utils.errors import ConfigurationError, StorageError
from reform_hub.utils.logging import get_logger

_PROVIDER_NAME = "r2"
_DEFAULT_CONTENT_TYPE = "image/jpeg"
_DOWNLOAD_TIMEOUT = 15.0

_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


def extension_for(content_type: str) -> str:
    """Map an image MIME type to a file extension, defaulting to ``jpg``."""
    mime = content_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(mime, "jpg")


def object_key(resource_id: str, content_type: str) -> str:
    return f"resources/{resource_id}.{extension_for(content_type)}"


class R2Storage(IObjectStorageProvider):
    """Uploads resource images to a public R2 bucket.

    Parameters
    ----------
    settings:
        Supplies account id, access keys, bucket name and public base URL.
    http_client:
        Injected ``httpx.AsyncClient`` used to download source images.
    s3_client:
        Optional pre-built boto3 S3 client (tests inject a mock).
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        s3_client: Any | None = None,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._client = s3_client
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._settings.has_storage_credentials():
                raise ConfigurationError(
                    message=(
                        "Missing Cloudflare R2 credentials: set CLOUDFLARE_ACCOUNT_ID, "
                        "CLOUDFLARE_ACCESS_KEY_ID and CLOUDFLARE_SECRET_ACCESS_KEY"
                    ),
                    provider_name=_PROVIDER_NAME,
                )
            self._client = boto3.client(
                "s3",
                region_name="auto",
                endpoint_url=(
                    f"https://{self._settings.cloudflare_account_id}.r2.cloudflarestorage.com"
                ),
                aws_access_key_id=self._settings.cloudflare_access_key_id,
                aws_secret_access_key=self._settings.cloudflare_secret_access_key,
            )
        return self._client

    def _bucket_and_public_url(self) -> tuple[str, str]:
        bucket = self._settings.cloudflare_r2_bucket_name
        public_url = self._settings.cloudflare_r2_public_url.rstrip("/")
        if not bucket:
            raise ConfigurationError(
                message="CLOUDFLARE_R2_BUCKET_NAME is not set",
                provider_name=_PROVIDER_NAME,
            )
        if not public_url:
            raise ConfigurationError(
                message="CLOUDFLARE_R2_PUBLIC_URL is not set",
                provider_name=_PROVIDER_NAME,
            )
        return bucket, public_url

    async def _download(self, image_url: str) -> tuple[bytes, str]:
        try:
            response = await self._http.get(
                image_url, timeout=_DOWNLOAD_TIMEOUT, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(
                message=f"Failed to download image: HTTP {exc.response.status_code}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageError(
                message=f"Failed to download image: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        content_type = response.headers.get("content-type") or _DEFAULT_CONTENT_TYPE
        return response.content, content_type

    # -- IObjectStorageProvider implementation ---------------------------------

    async def upload_image_from_url(self, image_url: str, resource_id: str) -> str:
        # Fail on configuration before spending a download.
        self._bucket_and_public_url()
        self._get_client()

        data, content_type = await self._download(image_url)
        return await self.upload_bytes(data, object_key(resource_id, content_type), content_type)

    async def upload_bytes(self, data: bytes, key: str, content_type: str) -> str:
        bucket, public_url = self._bucket_and_public_url()
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.put_object,
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(
                message=f"Upload of {key} failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        final_url = f"{public_url}/{key}"
        self._logger.info("r2_upload_complete", key=key, size=len(data), url=final_url)
        return final_url

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(
            self._settings.has_storage_credentials()
            and self._settings.cloudflare_r2_bucket_name
            and self._settings.cloudflare_r2_public_url
        )
