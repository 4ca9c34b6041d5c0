"""Contribution intake: validate a visitor submission and queue it for review.

Submissions land in the contribution collection (``DocsWithImages``) with
``status = "pending_review"``; nothing is published until an editor
approves it outside this service.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from reform_hub.interfaces.document_store_provider import IDocumentStoreProvider
from reform_hub.models.contribution import Contribution
from reform_hub.models.resource import DEFAULT_THEME_LABEL
from reform_hub.utils.errors import ContributionError
from reform_hub.utils.logging import get_logger

CONTRIBUTION_PLATFORM = "User Contribution"
DEFAULT_SOURCE_TYPE = "contribution"
DEFAULT_AUTHOR = "Anonymous"
DEFAULT_LOCATION = "National"
PENDING_REVIEW = "pending_review"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_record(contribution: Contribution, now: datetime) -> dict[str, Any]:
    """Translate a contribution into store properties."""
    return {
        "source_title": contribution.title,
        "summary": contribution.summary,
        "sourceType": contribution.resource_type or DEFAULT_SOURCE_TYPE,
        "sourcePlatform": CONTRIBUTION_PLATFORM,
        "authors": contribution.name or DEFAULT_AUTHOR,
        "linkToOriginalSource": contribution.resource_url,
        "dateOfPublication": now.date().isoformat(),
        "theme": contribution.theme or DEFAULT_THEME_LABEL,
        "subTheme": "",
        "keywords": ", ".join(contribution.tags),
        "location": contribution.location or DEFAULT_LOCATION,
        "contributorEmail": contribution.email,
        "contributedAt": now.isoformat().replace("+00:00", "Z"),
        "status": PENDING_REVIEW,
    }


class ContributionService:
    """Writes validated contributions to the store."""

    def __init__(
        self,
        store: IDocumentStoreProvider,
        collection: str = "DocsWithImages",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._collection = collection
        self._clock = clock
        self._logger = get_logger(__name__)

    @staticmethod
    def validate(contribution: Contribution) -> None:
        if not (contribution.title and contribution.summary and contribution.resource_url):
            raise ContributionError()

    async def submit(self, contribution: Contribution) -> str:
        """Store *contribution* and return the new record id.

        Raises
        ------
        ContributionError
            If title, summary or resource URL is missing.  Raised before any
            store call.
        StoreError
            If the store rejects the write.
        """
        self.validate(contribution)
        record = build_record(contribution, self._clock())
        object_id = await self._store.create_object(self._collection, record)
        self._logger.info(
            "contribution_saved",
            object_id=object_id,
            title=contribution.title,
            tag_count=len(contribution.tags),
        )
        return object_id
