"""reformHub domain models.

    - resource.py -- Resource, Category, ThemeSection and the RawRecord boundary type
    - filters.py  -- SearchFilters, DateRange, FacetSnapshot
    - where.py    -- typed store filter tree and search clauses
    - contribution.py -- Contribution intake model
"""

from __future__ import annotations

from reform_hub.models.contribution import Contribution
from reform_hub.models.filters import DateRange, FacetSnapshot, SearchFilters
from reform_hub.models.resource import (
    DEFAULT_THEME_LABEL,
    Category,
    RawRecord,
    Resource,
    ThemeSection,
    slug_href,
)
from reform_hub.models.where import (
    Bm25Query,
    HybridQuery,
    NearTextQuery,
    WhereCondition,
    WhereFilter,
    WhereLogical,
    WhereOperator,
)

__all__ = [
    "DEFAULT_THEME_LABEL",
    "Bm25Query",
    "Category",
    "Contribution",
    "DateRange",
    "FacetSnapshot",
    "HybridQuery",
    "NearTextQuery",
    "RawRecord",
    "Resource",
    "SearchFilters",
    "ThemeSection",
    "WhereCondition",
    "WhereFilter",
    "WhereLogical",
    "WhereOperator",
    "slug_href",
]
