"""Contribution intake model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Contribution(BaseModel):
    """A resource suggested by a visitor through the contribute form.

    Every field is optional at the model level; the contribution service
    enforces the required ones so the rejection message stays user-facing.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    email: str = ""
    resource_url: str = ""
    title: str = ""
    summary: str = ""
    resource_type: str = ""
    location: str = ""
    theme: str = ""
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(t).strip() for t in value if str(t).strip()]

    @field_validator(
        "name", "email", "resource_url", "title", "summary",
        "resource_type", "location", "theme",
        mode="before",
    )
    @classmethod
    def _none_to_blank(cls, value: object) -> str:
        return "" if value is None else str(value).strip()
