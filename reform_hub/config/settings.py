"""Application settings loaded from environment variables via pydantic-settings.

Two sources, in priority order:

  1. Environment variables (``WEAVIATE_URL=https://...``), always win.
  2. The ``.env`` file in the project root, used for local development.

Field ``weaviate_api_key`` maps to ``WEAVIATE_API_KEY``.  Empty strings mean
"not configured"; the providers raise ``ConfigurationError`` at the call site
when a required value is empty rather than at import time, so the API can
still boot and report itself unhealthy.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """reformHub application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Document store (Weaviate) ===
    # Either a full URL (https://host[:port]) or a bare host.
    weaviate_url: str = ""
    weaviate_host: str = ""
    weaviate_api_key: str = ""
    # Forwarded as X-OpenAI-Api-Key so text2vec-openai can vectorise queries.
    openai_api_key: str = ""
    weaviate_collection: str = "Docs"
    contribution_collection: str = "DocsWithImages"
    store_timeout: float = 15.0
    schema_timeout: float = 10.0

    # === Object storage (Cloudflare R2, S3-compatible) ===
    cloudflare_account_id: str = ""
    cloudflare_access_key_id: str = ""
    cloudflare_secret_access_key: str = ""
    cloudflare_r2_bucket_name: str = ""
    cloudflare_r2_public_url: str = ""

    # === Facets & caching ===
    facet_cache_ttl: int = 30 * 60
    og_cache_ttl: int = 24 * 60 * 60
    facet_sample_size: int = 1000

    # === Page scraping ===
    og_fetch_timeout: float = 5.0
    page_fetch_timeout: float = 10.0
    browser_fallback_enabled: bool = True

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def weaviate_endpoint(self) -> str:
        """Return the raw store endpoint, preferring ``WEAVIATE_URL``."""
        return (self.weaviate_url or self.weaviate_host).strip()

    def has_store_credentials(self) -> bool:
        return bool(self.weaviate_endpoint and self.weaviate_api_key)

    def has_storage_credentials(self) -> bool:
        return bool(
            self.cloudflare_account_id
            and self.cloudflare_access_key_id
            and self.cloudflare_secret_access_key
        )
