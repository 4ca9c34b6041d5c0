"""Facet aggregation over resources and raw store records.

Two families of functions live here:

* **Result-page facets** (``rank_tags``, ``rank_themes``, ``distinct_types``,
  ``FacetSession``) work on mapped :class:`Resource` objects.  Values are
  grouped case-insensitively after trimming, counted, and displayed with the
  first casing encountered.  Ties keep first-seen order.
* **Store-wide facets** (``count_categories``, ``count_tags``,
  ``count_themes``, ``distinct_locations``) work on raw store items from a
  bounded sample and count exact strings.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Any

from reform_hub.models.filters import FacetSnapshot
from reform_hub.models.resource import Category, RawRecord, Resource
from reform_hub.utils.logging import get_logger

logger = get_logger(__name__)

TOP_TAGS = 15
TOP_THEMES = 10
TOP_CATEGORIES = 6


def _rank(values: Iterable[str], limit: int) -> list[Category]:
    counts: dict[str, int] = {}
    display: dict[str, str] = {}
    for value in values:
        name = value.strip()
        if not name:
            continue
        key = name.lower()
        if key not in display:
            display[key] = name
            counts[key] = 0
        counts[key] += 1
    # sorted() is stable, so equal counts stay in first-seen order.
    ranked = sorted(counts, key=lambda k: counts[k], reverse=True)
    return [Category.from_name(display[k], counts[k]) for k in ranked[:limit]]


def rank_tags(resources: Iterable[Resource], limit: int = TOP_TAGS) -> list[Category]:
    return _rank((tag for r in resources for tag in r.tags), limit)


def rank_themes(resources: Iterable[Resource], limit: int = TOP_THEMES) -> list[Category]:
    return _rank((r.theme for r in resources), limit)


def distinct_types(resources: Iterable[Resource]) -> list[str]:
    seen: list[str] = []
    for resource in resources:
        if resource.type not in seen:
            seen.append(resource.type)
    return seen


class FacetSession:
    """Facet state for one UI session.

    Tags and themes are re-ranked from every result page.  Types are captured
    from the first page only and then frozen, so the type filter list does not
    shrink as the user narrows the search.
    """

    def __init__(self, tag_limit: int = TOP_TAGS, theme_limit: int = TOP_THEMES) -> None:
        self._tag_limit = tag_limit
        self._theme_limit = theme_limit
        self._types: list[str] | None = None

    @property
    def types_frozen(self) -> bool:
        return self._types is not None

    def update(self, resources: list[Resource]) -> FacetSnapshot:
        if self._types is None:
            self._types = distinct_types(resources)
        return FacetSnapshot(
            tags=rank_tags(resources, self._tag_limit),
            themes=rank_themes(resources, self._theme_limit),
            types=list(self._types),
        )


# ---------------------------------------------------------------------------
# Store-wide facets over raw records
# ---------------------------------------------------------------------------


def _values(records: Iterable[Any], key: str) -> Iterable[tuple[RawRecord, Any]]:
    for item in records:
        try:
            raw = RawRecord.from_item(item)
        except ValueError:
            logger.debug("facet_record_skipped", key=key)
            continue
        value = raw.top.get(key)
        if value is None:
            value = raw.properties.get(key)
        yield raw, value


def _split_keywords(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value]
    elif isinstance(value, str):
        parts = value.split(",")
    else:
        return []
    return [p.strip() for p in parts if p.strip()]


def _sorted_categories(counter: Counter[str], limit: int | None = None) -> list[Category]:
    # most_common keeps insertion order for equal counts.
    return [Category.from_name(name, count) for name, count in counter.most_common(limit)]


def count_categories(records: Iterable[Any], limit: int = TOP_CATEGORIES) -> list[Category]:
    """Top categories mixing ``theme``, ``subTheme`` and individual keywords."""
    counter: Counter[str] = Counter()
    for item in records:
        try:
            raw = RawRecord.from_item(item)
        except ValueError:
            continue
        for key in ("theme", "subTheme"):
            value = raw.top.get(key)
            if isinstance(value, str) and value.strip():
                counter[value.strip()] += 1
        counter.update(_split_keywords(raw.top.get("keywords")))
    return _sorted_categories(counter, limit)


def count_tags(records: Iterable[Any]) -> list[Category]:
    counter: Counter[str] = Counter()
    for _, value in _values(records, "keywords"):
        counter.update(_split_keywords(value))
    return _sorted_categories(counter)


def count_themes(records: Iterable[Any]) -> list[Category]:
    counter: Counter[str] = Counter()
    for _, value in _values(records, "theme"):
        if isinstance(value, str) and value.strip():
            counter[value.strip()] += 1
    return _sorted_categories(counter)


def distinct_locations(records: Iterable[Any]) -> list[str]:
    found = {
        value.strip()
        for _, value in _values(records, "location")
        if isinstance(value, str) and value.strip()
    }
    return sorted(found)

