"""Resource domain models for the reformHub portal.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph).
#
# ``RawRecord`` is the only place a loosely-typed Weaviate object exists.
# The result mapper validates each raw item into a ``RawRecord`` once and
# converts it into the canonical ``Resource``; nothing above the mapper
# ever touches the raw dict shape.
#
# JSON keeps the portal's original camelCase wire names
# (``linkToOriginalSource``, ``dateOfPublication``) through an alias
# generator, while Python code uses snake_case attributes.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_THEME_LABEL = "General"

_WHITESPACE_RUN = re.compile(r"\s+")


def slug_href(name: str) -> str:
    """Build the ``/tag/<slug>`` link used by facet chips."""
    slug = _WHITESPACE_RUN.sub("-", name.lower())
    return f"/tag/{quote(slug, safe='')}"


class Resource(BaseModel):
    """A report, article, judgment, video or podcast surfaced by the portal.

    ``id`` is the identifier assigned by the document store, or ``None``
    when the store returned none.  In that case :attr:`route_key` falls back
    to the title.  Two resources sharing a title collide on that key; this
    is a known limitation rather than something the mapper papers over with
    invented identifiers.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    title: str = "Untitled Resource"
    summary: str = "No summary available"
    type: str = "Report"
    tags: list[str] = Field(default_factory=list)
    source: str = "Unknown Source"
    date: str
    image: str | None = None
    featured: bool = False
    source_type: str = ""
    source_platform: str = ""
    authors: str = ""
    link_to_original_source: str = ""
    date_of_publication: str = ""
    sub_theme: str = ""
    keywords: str = ""
    location: str = ""
    theme: str = ""

    @property
    def display_theme(self) -> str:
        return self.theme.strip() or DEFAULT_THEME_LABEL

    @property
    def route_key(self) -> str:
        return self.id or self.title


class Category(BaseModel):
    """A facet value with its occurrence count and chip link."""

    model_config = ConfigDict(frozen=True)

    name: str
    count: int = Field(ge=0)
    href: str

    @classmethod
    def from_name(cls, name: str, count: int) -> Category:
        return cls(name=name, count=count, href=slug_href(name))


class RawRecord(BaseModel):
    """A store object split into its three field scopes.

    Weaviate GraphQL results put schema properties at the top level and the
    identifier under ``_additional``; REST objects nest properties under a
    ``properties`` key.  Records written by older importers mix both.
    """

    model_config = ConfigDict(frozen=True)

    top: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(default_factory=dict)
    additional: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_item(cls, item: Any) -> RawRecord:
        """Validate a raw store item.

        Raises
        ------
        ValueError
            If *item* is not a mapping.
        """
        if not isinstance(item, Mapping):
            raise ValueError(f"store item must be a mapping, got {type(item).__name__}")
        props = item.get("properties")
        addl = item.get("_additional")
        return cls(
            top=dict(item),
            properties=dict(props) if isinstance(props, Mapping) else {},
            additional=dict(addl) if isinstance(addl, Mapping) else {},
        )

    def scope(self, name: str) -> dict[str, Any]:
        if name == "properties":
            return self.properties
        if name == "_additional":
            return self.additional
        return self.top


class ThemeSection(BaseModel):
    """One dashboard row: a theme, its sample count and a few resources."""

    model_config = ConfigDict(frozen=True)

    theme: str
    count: int = Field(ge=0)
    href: str
    resources: list[Resource] = Field(default_factory=list)
