"""Structured filter tree and search clauses for the document store.

A ``where`` filter is a tagged union of :class:`WhereCondition` (a single
path comparison) and :class:`WhereLogical` (``And`` / ``Or`` over child
filters).  The store provider renders these into Weaviate GraphQL literal
syntax; the query builder only ever produces these typed objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class WhereOperator(str, Enum):
    """Operators understood by the Weaviate ``where`` filter."""

    AND = "And"
    OR = "Or"
    EQUAL = "Equal"
    LIKE = "Like"
    GREATER_THAN_EQUAL = "GreaterThanEqual"
    LESS_THAN_EQUAL = "LessThanEqual"


_LOGICAL = frozenset({WhereOperator.AND, WhereOperator.OR})


@dataclass(frozen=True)
class WhereCondition:
    """Compare one property path against a text or date value."""

    path: tuple[str, ...]
    operator: WhereOperator
    value_text: str | None = None
    value_date: str | None = None

    def __post_init__(self) -> None:
        if self.operator in _LOGICAL:
            raise ValueError(f"{self.operator.value} is not a path operator")
        if (self.value_text is None) == (self.value_date is None):
            raise ValueError("exactly one of value_text / value_date must be set")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"path": list(self.path), "operator": self.operator.value}
        if self.value_text is not None:
            out["valueText"] = self.value_text
        else:
            out["valueDate"] = self.value_date
        return out


@dataclass(frozen=True)
class WhereLogical:
    """Combine child filters with ``And`` or ``Or``."""

    operator: WhereOperator
    operands: tuple[WhereFilter, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.operator not in _LOGICAL:
            raise ValueError(f"{self.operator.value} is not a logical operator")

    def to_dict(self) -> dict[str, Any]:
        return {
            "operator": self.operator.value,
            "operands": [o.to_dict() for o in self.operands],
        }


WhereFilter = Union[WhereCondition, WhereLogical]


def like(path: str, value: str) -> WhereCondition:
    return WhereCondition(path=(path,), operator=WhereOperator.LIKE, value_text=value)


def any_of(operands: list[WhereFilter]) -> WhereFilter:
    """OR the operands, collapsing a single operand to itself."""
    if len(operands) == 1:
        return operands[0]
    return WhereLogical(operator=WhereOperator.OR, operands=tuple(operands))


def all_of(operands: list[WhereFilter]) -> WhereFilter:
    """AND the operands, collapsing a single operand to itself."""
    if len(operands) == 1:
        return operands[0]
    return WhereLogical(operator=WhereOperator.AND, operands=tuple(operands))


# ---------------------------------------------------------------------------
# Search clauses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bm25Query:
    query: str
    properties: tuple[str, ...] = ()


@dataclass(frozen=True)
class HybridQuery:
    query: str
    alpha: float = 0.5


@dataclass(frozen=True)
class NearTextQuery:
    concepts: tuple[str, ...]
    certainty: float | None = None
