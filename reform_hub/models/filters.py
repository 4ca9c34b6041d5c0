"""Search filter and facet snapshot models."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reform_hub.models.resource import Category


def _parse_bound(value: str) -> str:
    """Accept ``YYYY-MM-DD`` or an ISO-8601 timestamp; raise on anything else."""
    text = value.strip()
    try:
        date.fromisoformat(text)
    except ValueError:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
    return text


class DateRange(BaseModel):
    """Inclusive publication-date bounds.  Either side may be omitted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _validate_bound(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return _parse_bound(str(value))

    def is_empty(self) -> bool:
        return self.from_ is None and self.to is None


class SearchFilters(BaseModel):
    """Facet filters for a search.  OR within a field, AND across fields."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    types: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    date_range: DateRange | None = Field(default=None, alias="dateRange")

    @field_validator("types", "themes", "sources", "authors", "locations", mode="before")
    @classmethod
    def _drop_blank(cls, values: list[str] | None) -> list[str]:
        if not values:
            return []
        return [str(v).strip() for v in values if v is not None and str(v).strip()]

    def is_empty(self) -> bool:
        has_lists = any([self.types, self.themes, self.sources, self.authors, self.locations])
        has_dates = self.date_range is not None and not self.date_range.is_empty()
        return not (has_lists or has_dates)


class FacetSnapshot(BaseModel):
    """Ranked facet values for populating filter controls."""

    model_config = ConfigDict(frozen=True)

    tags: list[Category] = Field(default_factory=list)
    themes: list[Category] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
