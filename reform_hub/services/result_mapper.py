"""Map raw document-store records into canonical :class:`Resource` objects.

# ─── FIELD RESOLUTION ────────────────────────────────────────────────
#
# Records in the store were written by several importers over time, so a
# given field may live at the top level or nested under ``properties``,
# and under more than one name.  ``FIELD_PATHS`` is the single ordered
# table of (scope, key) accessors per canonical field; the first valid,
# non-empty value wins.  Adding an alias is a one-line change there.
#
# Links are stricter: only absolute http(s) URLs survive; relative links
# and ``#`` placeholders map to ``""`` so the UI never renders a dead href.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import Any

from reform_hub.models.resource import RawRecord, Resource
from reform_hub.utils.logging import get_logger
from reform_hub.utils.urls import is_valid_http_url

logger = get_logger(__name__)

_TOP = "top"
_PROPS = "properties"
_ADDL = "_additional"

LINK_ALIASES: tuple[str, ...] = (
    "link",
    "linkToOriginalSource",
    "url",
    "source_url",
    "originalSource",
    "original_source",
)

FIELD_PATHS: dict[str, tuple[tuple[str, str], ...]] = {
    "id": ((_ADDL, "id"), (_TOP, "id"), (_TOP, "uuid")),
    "title": ((_TOP, "source_title"), (_TOP, "title"), (_PROPS, "source_title"), (_PROPS, "title")),
    "summary": ((_TOP, "summary"), (_PROPS, "summary"), (_TOP, "description")),
    "source_type": ((_TOP, "sourceType"), (_PROPS, "sourceType"), (_TOP, "type")),
    "source_platform": ((_TOP, "sourcePlatform"), (_PROPS, "sourcePlatform"), (_TOP, "source")),
    "authors": ((_TOP, "authors"), (_PROPS, "authors")),
    "date": ((_TOP, "dateOfPublication"), (_PROPS, "dateOfPublication"), (_TOP, "date")),
    "image": ((_TOP, "image"), (_PROPS, "image"), (_TOP, "imageUrl")),
    "keywords": ((_TOP, "keywords"), (_PROPS, "keywords"), (_TOP, "tags")),
    "sub_theme": ((_TOP, "subTheme"), (_PROPS, "subTheme")),
    "location": ((_TOP, "location"), (_PROPS, "location")),
    "theme": ((_TOP, "theme"), (_PROPS, "theme")),
    "link": tuple((scope, alias) for scope in (_TOP, _PROPS) for alias in LINK_ALIASES),
}

# Checked in order; first substring hit decides the display type.
_TYPE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("report",), "Report"),
    (("article", "journal"), "Article"),
    (("judgment", "court"), "Judgment"),
    (("video", "documentary"), "Video"),
    (("podcast", "audio"), "Podcast"),
)
DEFAULT_DISPLAY_TYPE = "Report"


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return bool(value)
    return True


def resolve_field(raw: RawRecord, field: str) -> Any:
    """Return the first non-empty value for *field* following ``FIELD_PATHS``."""
    for scope, key in FIELD_PATHS[field]:
        value = raw.scope(scope).get(key)
        if _is_present(value):
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if _is_present(v))
    return str(value).strip()


def pick_best_link(raw: RawRecord) -> str:
    """Return the first absolute http(s) link among the link aliases, or ``""``."""
    for scope, key in FIELD_PATHS["link"]:
        value = raw.scope(scope).get(key)
        candidates = value if isinstance(value, (list, tuple)) else [value]
        for candidate in candidates:
            if is_valid_http_url(candidate):
                return candidate.strip()
    return ""


def map_source_type(raw_type: Any) -> str:
    lowered = _text(raw_type).lower()
    for needles, label in _TYPE_RULES:
        if any(n in lowered for n in needles):
            return label
    return DEFAULT_DISPLAY_TYPE


def parse_keywords(value: Any) -> list[str]:
    """Split keywords into trimmed, non-empty tags.

    Strings split on commas; lists are stringified per item; any other
    non-null value is coerced to a string first.  Repeats are kept;
    case-insensitive grouping happens in the aggregator.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value if v is not None]
    else:
        parts = str(value).split(",")

    return [tag for tag in (part.strip() for part in parts) if tag]


def format_date(value: Any, today: date | None = None) -> str:
    """Normalise a publication date to ``YYYY-MM-DD``.

    Accepts ``date``/``datetime`` objects, ISO dates, RFC-3339 timestamps and
    epoch milliseconds.  Missing or unparseable values fall back to *today*.
    """
    fallback = (today or date.today()).isoformat()
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date().isoformat()
        except (OverflowError, OSError, ValueError):
            return fallback

    text = str(value).strip()
    if not text:
        return fallback
    if text.isdigit():
        return format_date(int(text), today)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return fallback


def map_record(raw: RawRecord, index: int = 0, today: date | None = None) -> Resource:
    """Convert one validated store record into a :class:`Resource`.

    The record at *index* ``0`` of a page is flagged as ``featured``.
    """
    raw_type = _text(resolve_field(raw, "source_type"))
    keywords_value = resolve_field(raw, "keywords")
    platform = _text(resolve_field(raw, "source_platform"))
    raw_date = resolve_field(raw, "date")
    image = resolve_field(raw, "image")
    record_id = resolve_field(raw, "id")

    fields: dict[str, Any] = {
        "id": str(record_id) if record_id is not None else None,
        "type": map_source_type(raw_type),
        "tags": parse_keywords(keywords_value),
        "date": format_date(raw_date, today),
        "image": image.strip() if is_valid_http_url(image) else None,
        "featured": index == 0,
        "source_type": raw_type,
        "source_platform": platform,
        "authors": _text(resolve_field(raw, "authors")),
        "link_to_original_source": pick_best_link(raw),
        "date_of_publication": _text(raw_date),
        "sub_theme": _text(resolve_field(raw, "sub_theme")),
        "keywords": _text(keywords_value),
        "location": _text(resolve_field(raw, "location")),
        "theme": _text(resolve_field(raw, "theme")),
    }
    # Fields with display defaults are only set when the record has a value.
    title = _text(resolve_field(raw, "title"))
    summary = _text(resolve_field(raw, "summary"))
    if title:
        fields["title"] = title
    if summary:
        fields["summary"] = summary
    if platform:
        fields["source"] = platform
    return Resource(**fields)


def map_records(raw_items: Iterable[Any], today: date | None = None) -> list[Resource]:
    """Map a page of raw store items, skipping malformed entries.

    ``featured`` goes to the first item that maps successfully.
    """
    resources: list[Resource] = []
    for position, item in enumerate(raw_items):
        try:
            raw = RawRecord.from_item(item)
            resource = map_record(raw, index=len(resources), today=today)
        except ValueError as exc:
            logger.warning("malformed_store_record", position=position, error=str(exc))
            continue
        resources.append(resource)
    return resources
