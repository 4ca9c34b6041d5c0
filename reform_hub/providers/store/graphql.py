"""Render typed filters and search clauses as Weaviate GraphQL literals.

Weaviate's ``Get`` arguments are GraphQL input objects, not JSON: keys and
operator enums are bare identifiers while string values are quoted.  String
values go through ``json.dumps`` so quotes, backslashes and newlines in user
input are escaped and cannot break out of the literal.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from reform_hub.models.where import (
    Bm25Query,
    HybridQuery,
    NearTextQuery,
    WhereCondition,
    WhereFilter,
    WhereLogical,
)

FALLBACK_FIELDS = (
    "source_title summary sourceType keywords sourcePlatform authors "
    "dateOfPublication image linkToOriginalSource subTheme location theme"
)


class _Bare(str):
    """A value emitted without quotes (GraphQL enum)."""


def render_value(value: Any) -> str:
    if isinstance(value, _Bare):
        return str(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(render_value(v) for v in value) + "]"
    if isinstance(value, dict):
        inner = ", ".join(f"{k}: {render_value(v)}" for k, v in value.items() if v is not None)
        return "{" + inner + "}"
    raise TypeError(f"cannot render {type(value).__name__} as a GraphQL literal")


def _where_object(where: WhereFilter) -> dict[str, Any]:
    if isinstance(where, WhereLogical):
        return {
            "operator": _Bare(where.operator.value),
            "operands": [_where_object(o) for o in where.operands],
        }
    out: dict[str, Any] = {
        "path": list(where.path),
        "operator": _Bare(where.operator.value),
    }
    if where.value_text is not None:
        out["valueText"] = where.value_text
    else:
        out["valueDate"] = where.value_date
    return out


def render_where(where: WhereCondition | WhereLogical) -> str:
    return render_value(_where_object(where))


def build_get_query(
    collection: str,
    fields: str,
    where: WhereFilter | None = None,
    bm25: Bm25Query | None = None,
    hybrid: HybridQuery | None = None,
    near_text: NearTextQuery | None = None,
    limit: int | None = None,
) -> str:
    """Assemble a ``{ Get { Collection(args) { fields } } }`` query string."""
    args: list[str] = []
    if limit is not None:
        args.append(f"limit: {int(limit)}")
    if where is not None:
        args.append(f"where: {render_where(where)}")
    if bm25 is not None:
        clause: dict[str, Any] = {"query": bm25.query}
        if bm25.properties:
            clause["properties"] = list(bm25.properties)
        args.append(f"bm25: {render_value(clause)}")
    if hybrid is not None:
        args.append(f"hybrid: {render_value({'query': hybrid.query, 'alpha': hybrid.alpha})}")
    if near_text is not None:
        clause = {"concepts": list(near_text.concepts), "certainty": near_text.certainty}
        args.append(f"nearText: {render_value(clause)}")

    additional = ["id"]
    if bm25 is not None or hybrid is not None:
        additional.append("score")
    if near_text is not None:
        additional.append("certainty")

    arg_text = f"({', '.join(args)})" if args else ""
    return (
        f"{{ Get {{ {collection}{arg_text} "
        f"{{ {fields} _additional {{ {' '.join(additional)} }} }} }} }}"
    )
