"""Abort-on-supersede search for a single UI consumer.

A user typing into the search box fires a new request on every change.
Without cancellation a slow early response can land after a fast later one
and overwrite fresher results.  ``SearchSession.submit`` cancels whatever
search the session still has in flight before starting the next, and a
superseded call returns ``None`` instead of a result.

The session also owns the consumer's :class:`FacetSession`, which is only
ever updated with the results of a search that was not superseded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from reform_hub.models.filters import FacetSnapshot, SearchFilters
from reform_hub.models.resource import Resource
from reform_hub.services.aggregator import FacetSession
from reform_hub.services.search_service import SearchService
from reform_hub.utils.logging import get_logger


@dataclass(frozen=True)
class SearchOutcome:
    request_id: str
    resources: list[Resource]
    facets: FacetSnapshot


class SearchSession:
    """Serialises one consumer's searches so only the latest one completes."""

    def __init__(self, service: SearchService, facets: FacetSession | None = None) -> None:
        self._service = service
        self._facets = facets or FacetSession()
        self._current: asyncio.Task[list[Resource]] | None = None
        self._generation = 0
        self._logger = get_logger(__name__)

    @property
    def facets(self) -> FacetSession:
        return self._facets

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    def cancel(self) -> None:
        """Abort the in-flight search, if any."""
        if self._current is not None and not self._current.done():
            self._current.cancel()
        self._current = None

    async def submit(
        self,
        request_id: str,
        query: str = "",
        filters: SearchFilters | None = None,
        limit: int | None = None,
    ) -> SearchOutcome | None:
        """Run a search, superseding any earlier one from this session.

        Returns
        -------
        SearchOutcome or None
            ``None`` when a later ``submit`` (or :meth:`cancel`) aborted
            this search before it finished.
        """
        self.cancel()
        self._generation += 1
        generation = self._generation

        task = asyncio.create_task(self._service.search(query, filters, limit))
        self._current = task
        try:
            resources = await task
        except asyncio.CancelledError:
            if generation != self._generation or (task.cancelled() and self._current is None):
                self._logger.debug("search_superseded", request_id=request_id)
                return None
            raise
        finally:
            if self._current is task:
                self._current = None

        if generation != self._generation:
            self._logger.debug("search_superseded", request_id=request_id)
            return None

        snapshot = self._facets.update(resources)
        return SearchOutcome(request_id=request_id, resources=resources, facets=snapshot)
