"""Translate a free-text query plus facet filters into a store search plan.

Three modes, chosen from what the caller supplied:

* **FILTERED** -- at least one facet filter.  Each field becomes wildcard
  ``Like`` conditions OR'd within the field; fields are AND'd together.
  A non-empty text query joins as one more condition: ``Like *query*`` on
  title, summary and keywords, OR'd.  No relevance ranking.
* **BM25** -- no filters, non-empty query.  The store's keyword relevance
  search over the same three text fields.
* **SAMPLE** -- nothing at all.  An unranked, unfiltered page bounded by
  ``limit``; the facet endpoints aggregate over it.

Type filters go through a synonym table so ``"judgment"`` also finds
``"Court Order"`` and ``"Case Summary"`` source types.  Unknown types fall
back to the raw value plus its lower- and upper-cased forms.

``evaluate`` re-implements the store's ``Like`` / date comparison semantics
in-process so plans can be checked against plain records without a store.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from reform_hub.models.filters import DateRange, SearchFilters
from reform_hub.models.where import (
    Bm25Query,
    WhereCondition,
    WhereFilter,
    WhereLogical,
    WhereOperator,
    all_of,
    any_of,
    like,
)

DEFAULT_LIMIT = 20

TEXT_FIELDS: tuple[str, ...] = ("source_title", "summary", "keywords")

DEFAULT_TYPE_SYNONYMS: dict[str, list[str]] = {
    "report": ["*report*", "*Report*"],
    "article": ["*article*", "*Article*", "*journal*", "*Journal*", "*paper*", "*Paper*"],
    "judgment": [
        "*judgment*", "*Judgment*", "*judgement*", "*Judgement*",
        "*court*", "*Court*", "*case*", "*Case*",
    ],
    "video": ["*video*", "*Video*", "*documentary*", "*Documentary*"],
    "podcast": ["*podcast*", "*Podcast*", "*audio*", "*Audio*"],
}

_TYPE_PATH = "sourceType"
_DATE_PATH = "dateOfPublication"

# (SearchFilters attribute, store property), in the order conditions are emitted.
_FACET_PATHS: tuple[tuple[str, str], ...] = (
    ("themes", "theme"),
    ("sources", "sourcePlatform"),
    ("locations", "location"),
    ("authors", "authors"),
)


class SearchMode(str, Enum):
    SAMPLE = "sample"
    BM25 = "bm25"
    FILTERED = "filtered"


@dataclass(frozen=True)
class SearchPlan:
    """What to ask the store for.  ``where`` and ``bm25`` are never both set."""

    mode: SearchMode
    limit: int
    where: WhereFilter | None = None
    bm25: Bm25Query | None = None


def _wrap(value: str) -> str:
    return f"*{value}*"


def _to_rfc3339(value: str, end_of_day: bool) -> str:
    """Date-only bounds widen to the whole day so both ends stay inclusive."""
    try:
        day = date.fromisoformat(value)
    except ValueError:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.isoformat().replace("+00:00", "Z")
    clock = "23:59:59" if end_of_day else "00:00:00"
    return f"{day.isoformat()}T{clock}Z"


class QueryBuilder:
    """Builds :class:`SearchPlan` objects.  Stateless; safe to share.

    Parameters
    ----------
    type_synonyms:
        Lower-cased type key -> ``Like`` patterns.  Defaults to
        :data:`DEFAULT_TYPE_SYNONYMS`.
    text_fields:
        Properties searched by the free-text query.
    default_limit:
        Page size used when the caller passes ``limit=None``.
    """

    def __init__(
        self,
        type_synonyms: dict[str, list[str]] | None = None,
        text_fields: tuple[str, ...] = TEXT_FIELDS,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        synonyms = type_synonyms if type_synonyms is not None else DEFAULT_TYPE_SYNONYMS
        self._type_synonyms = {k.strip().lower(): list(v) for k, v in synonyms.items()}
        self._text_fields = tuple(text_fields)
        self._default_limit = default_limit

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> QueryBuilder:
        search = config.get("search", {})
        return cls(
            type_synonyms=search.get("type_synonyms"),
            text_fields=tuple(search.get("text_fields") or TEXT_FIELDS),
            default_limit=int(search.get("default_limit", DEFAULT_LIMIT)),
        )

    @property
    def text_fields(self) -> tuple[str, ...]:
        return self._text_fields

    def plan(
        self,
        query: str = "",
        filters: SearchFilters | None = None,
        limit: int | None = None,
    ) -> SearchPlan:
        page = max(1, limit if limit is not None else self._default_limit)
        text = (query or "").strip()

        if filters is not None and not filters.is_empty():
            return SearchPlan(
                mode=SearchMode.FILTERED,
                limit=page,
                where=self.build_where(text, filters),
            )
        if text:
            return SearchPlan(
                mode=SearchMode.BM25,
                limit=page,
                bm25=Bm25Query(query=text, properties=self._text_fields),
            )
        return SearchPlan(mode=SearchMode.SAMPLE, limit=page)

    def build_where(self, query: str, filters: SearchFilters) -> WhereFilter | None:
        conditions: list[WhereFilter] = []

        text = (query or "").strip()
        if text:
            conditions.append(any_of([like(f, _wrap(text)) for f in self._text_fields]))

        if filters.types:
            operands: list[WhereFilter] = []
            for type_value in filters.types:
                operands.extend(like(_TYPE_PATH, p) for p in self.type_patterns(type_value))
            conditions.append(any_of(operands))

        for attr, path in _FACET_PATHS:
            values: list[str] = getattr(filters, attr)
            if values:
                conditions.append(any_of([like(path, _wrap(v)) for v in values]))

        if filters.date_range is not None and not filters.date_range.is_empty():
            conditions.append(self._date_condition(filters.date_range))

        if not conditions:
            return None
        return all_of(conditions)

    def type_patterns(self, type_value: str) -> list[str]:
        raw = str(type_value).strip()
        known = self._type_synonyms.get(raw.lower())
        if known:
            return list(known)
        return [_wrap(raw), _wrap(raw.lower()), _wrap(raw.upper())]

    @staticmethod
    def _date_condition(date_range: DateRange) -> WhereFilter:
        bounds: list[WhereFilter] = []
        if date_range.from_:
            bounds.append(
                WhereCondition(
                    path=(_DATE_PATH,),
                    operator=WhereOperator.GREATER_THAN_EQUAL,
                    value_date=_to_rfc3339(date_range.from_, end_of_day=False),
                )
            )
        if date_range.to:
            bounds.append(
                WhereCondition(
                    path=(_DATE_PATH,),
                    operator=WhereOperator.LESS_THAN_EQUAL,
                    value_date=_to_rfc3339(date_range.to, end_of_day=True),
                )
            )
        return all_of(bounds)


# ---------------------------------------------------------------------------
# In-process evaluation
# ---------------------------------------------------------------------------


def like_matches(pattern: str, value: Any) -> bool:
    """Case-sensitive ``Like`` match: ``*`` is any run, ``?`` one character."""
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return any(like_matches(pattern, v) for v in value)
    regex = "".join(
        ".*" if ch == "*" else "." if ch == "?" else re.escape(ch) for ch in pattern
    )
    return re.fullmatch(regex, str(value), flags=re.DOTALL) is not None


def _as_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def evaluate(where: WhereFilter | None, record: Mapping[str, Any]) -> bool:
    """Return ``True`` if *record* satisfies *where* (``None`` matches all)."""
    if where is None:
        return True
    if isinstance(where, WhereLogical):
        results = (evaluate(o, record) for o in where.operands)
        return all(results) if where.operator is WhereOperator.AND else any(results)

    value = record.get(where.path[0])
    if where.operator is WhereOperator.LIKE:
        return like_matches(where.value_text or "", value)
    if where.operator is WhereOperator.EQUAL:
        return value is not None and str(value) == where.value_text

    left = _as_datetime(value)
    right = _as_datetime(where.value_date)
    if left is None or right is None:
        return False
    if where.operator is WhereOperator.GREATER_THAN_EQUAL:
        return left >= right
    return left <= right
