"""Custom exception hierarchy for reformHub.

All application exceptions inherit from :class:`ReformHubError`, which
carries an optional ``provider_name`` so error handlers can tell which
external service (``"weaviate"``, ``"r2"``, ``"playwright"``) failed.

    ReformHubError  (base)
    +-- ConfigurationError   (missing credentials / environment)
    +-- StoreError           (document store query or mutation failed)
    |   +-- StoreTimeoutError
    +-- StorageError         (object storage download / upload failed)
    +-- ScrapeError          (page fetch or metadata extraction failed)
    +-- ContributionError    (user input rejected before any external call)

Read paths in the service layer catch ``StoreError`` and degrade to empty
results; configuration errors always propagate to the call site.
"""


class ReformHubError(Exception):
    """Base exception for all reformHub errors.

    ``__str__`` prefixes the provider name in brackets for log output,
    e.g. ``[weaviate] GraphQL query timed out``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(ReformHubError):
    """Raised when configuration is invalid or missing (credentials, bucket, URL)."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Document store errors
# ---------------------------------------------------------------------------

class StoreError(ReformHubError):
    """Raised when a document store request fails or returns GraphQL errors."""

    def __init__(
        self,
        message: str = "Document store request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreTimeoutError(StoreError):
    """Raised when a document store request exceeds its time budget."""

    def __init__(
        self,
        message: str = "Document store request timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Object storage / scraping errors
# ---------------------------------------------------------------------------

class StorageError(ReformHubError):
    """Raised when an image download or object-storage upload fails."""

    def __init__(
        self,
        message: str = "Object storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ScrapeError(ReformHubError):
    """Raised when a page cannot be fetched by any strategy."""

    def __init__(
        self,
        message: str = "Page fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ContributionError(ReformHubError):
    """Raised when a contribution is missing required fields.

    The message is user-facing and is returned verbatim with HTTP 400.
    """

    def __init__(
        self,
        message: str = "Title, summary, and resource URL are required",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
