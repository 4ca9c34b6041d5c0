"""Unit tests for the search query builder and in-process filter evaluation."""

from __future__ import annotations

import pytest

from reform_hub.models.filters import DateRange, SearchFilters
from reform_hub.models.where import WhereCondition, WhereLogical, WhereOperator
from reform_hub.services.query_builder import (
    TEXT_FIELDS,
    QueryBuilder,
    SearchMode,
    evaluate,
    like_matches,
)


@pytest.fixture
def builder() -> QueryBuilder:
    return QueryBuilder()


# ======================================================================
# Mode selection
# ======================================================================


class TestPlanModes:
    def test_no_query_no_filters_is_sample(self, builder: QueryBuilder) -> None:
        plan = builder.plan("", None, 7)
        assert plan.mode is SearchMode.SAMPLE
        assert plan.limit == 7
        assert plan.where is None and plan.bm25 is None

    def test_blank_query_is_sample(self, builder: QueryBuilder) -> None:
        assert builder.plan("   ", SearchFilters()).mode is SearchMode.SAMPLE

    def test_query_only_is_bm25_over_text_fields(self, builder: QueryBuilder) -> None:
        plan = builder.plan("  bail  ")
        assert plan.mode is SearchMode.BM25
        assert plan.bm25 is not None
        assert plan.bm25.query == "bail"
        assert plan.bm25.properties == TEXT_FIELDS
        assert plan.where is None

    def test_filters_force_filtered_mode(self, builder: QueryBuilder) -> None:
        plan = builder.plan("bail", SearchFilters(themes=["Courts"]))
        assert plan.mode is SearchMode.FILTERED
        assert plan.bm25 is None
        assert plan.where is not None

    def test_default_limit_applies(self) -> None:
        assert QueryBuilder(default_limit=12).plan("x").limit == 12

    def test_from_config_reads_search_section(self) -> None:
        builder = QueryBuilder.from_config(
            {"search": {"default_limit": 3, "type_synonyms": {"Memo": ["*memo*"]}}}
        )
        assert builder.plan().limit == 3
        assert builder.type_patterns("memo") == ["*memo*"]


# ======================================================================
# Where construction
# ======================================================================


class TestBuildWhere:
    def test_single_theme_collapses_to_condition(self, builder: QueryBuilder) -> None:
        where = builder.build_where("", SearchFilters(themes=["Courts"]))
        assert isinstance(where, WhereCondition)
        assert where.path == ("theme",)
        assert where.operator is WhereOperator.LIKE
        assert where.value_text == "*Courts*"

    def test_values_or_within_field_and_across_fields(self, builder: QueryBuilder) -> None:
        filters = SearchFilters(themes=["Courts", "Prisons"], locations=["Lagos"])
        where = builder.build_where("", filters)
        assert isinstance(where, WhereLogical)
        assert where.operator is WhereOperator.AND
        themes, location = where.operands
        assert isinstance(themes, WhereLogical) and themes.operator is WhereOperator.OR
        assert [o.value_text for o in themes.operands] == ["*Courts*", "*Prisons*"]
        assert location.path == ("location",)

    def test_text_query_joins_as_or_over_text_fields(self, builder: QueryBuilder) -> None:
        where = builder.build_where("bail", SearchFilters(sources=["NGO"]))
        assert isinstance(where, WhereLogical)
        text_group = where.operands[0]
        assert isinstance(text_group, WhereLogical)
        assert text_group.operator is WhereOperator.OR
        assert [o.path[0] for o in text_group.operands] == list(TEXT_FIELDS)
        assert where.operands[1].path == ("sourcePlatform",)

    def test_known_type_uses_synonyms(self, builder: QueryBuilder) -> None:
        where = builder.build_where("", SearchFilters(types=["Judgment"]))
        patterns = [o.value_text for o in where.operands]
        assert "*Court*" in patterns and "*case*" in patterns
        assert all(o.path == ("sourceType",) for o in where.operands)

    def test_unknown_type_falls_back_to_case_variants(self, builder: QueryBuilder) -> None:
        assert builder.type_patterns("Memo") == ["*Memo*", "*memo*", "*MEMO*"]

    def test_date_only_bounds_widen_to_whole_days(self, builder: QueryBuilder) -> None:
        filters = SearchFilters(date_range=DateRange(**{"from": "2023-01-01", "to": "2023-12-31"}))
        where = builder.build_where("", filters)
        assert isinstance(where, WhereLogical)
        low, high = where.operands
        assert low.operator is WhereOperator.GREATER_THAN_EQUAL
        assert low.value_date == "2023-01-01T00:00:00Z"
        assert high.operator is WhereOperator.LESS_THAN_EQUAL
        assert high.value_date == "2023-12-31T23:59:59Z"

    def test_one_sided_date_range(self, builder: QueryBuilder) -> None:
        filters = SearchFilters(date_range=DateRange(to="2020-05-05"))
        where = builder.build_where("", filters)
        assert isinstance(where, WhereCondition)
        assert where.value_date == "2020-05-05T23:59:59Z"

    def test_condition_order_is_stable(self, builder: QueryBuilder) -> None:
        filters = SearchFilters(
            types=["memo"],
            themes=["t"],
            sources=["s"],
            locations=["l"],
            authors=["a"],
            date_range=DateRange(**{"from": "2020-01-01"}),
        )
        where = builder.build_where("q", filters)
        paths = []
        for operand in where.operands:
            first = operand.operands[0] if isinstance(operand, WhereLogical) else operand
            paths.append(first.path[0])
        assert paths == [
            "source_title",
            "sourceType",
            "theme",
            "sourcePlatform",
            "location",
            "authors",
            "dateOfPublication",
        ]

    def test_blank_filter_values_are_dropped(self) -> None:
        assert SearchFilters(themes=["", "  "]).is_empty()

    def test_invalid_date_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            DateRange(**{"from": "not-a-date"})


# ======================================================================
# In-process evaluation
# ======================================================================


class TestEvaluate:
    def test_like_wildcards(self) -> None:
        assert like_matches("*bail*", "Pre-bail hearing")
        assert like_matches("B?il", "Bail")
        assert not like_matches("*bail*", "BAIL")

    def test_like_matches_any_list_item(self) -> None:
        assert like_matches("*court*", ["prisons", "high court"])
        assert not like_matches("*court*", None)

    def test_filtered_plan_matches_expected_records(self, builder: QueryBuilder) -> None:
        filters = SearchFilters(
            themes=["Courts"],
            date_range=DateRange(**{"from": "2023-01-01", "to": "2023-12-31"}),
        )
        where = builder.build_where("", filters)
        inside = {"theme": "Courts", "dateOfPublication": "2023-12-31T18:00:00Z"}
        too_late = {"theme": "Courts", "dateOfPublication": "2024-01-01T00:00:00Z"}
        wrong_theme = {"theme": "Prisons", "dateOfPublication": "2023-06-01T00:00:00Z"}
        assert evaluate(where, inside)
        assert not evaluate(where, too_late)
        assert not evaluate(where, wrong_theme)

    def test_none_where_matches_everything(self) -> None:
        assert evaluate(None, {})

    def test_unparseable_date_never_matches(self, builder: QueryBuilder) -> None:
        where = builder.build_where(
            "", SearchFilters(date_range=DateRange(**{"from": "2020-01-01"}))
        )
        assert not evaluate(where, {"dateOfPublication": "sometime"})

    def test_judgment_filter_matches_court_orders_only(self, builder: QueryBuilder) -> None:
        where = builder.build_where("", SearchFilters(types=["judgment"]))
        assert evaluate(where, {"sourceType": "Court Order"})
        assert not evaluate(where, {"sourceType": "Podcast Episode"})
