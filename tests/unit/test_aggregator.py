"""Unit tests for facet ranking and store-wide facet counts."""

from __future__ import annotations

from reform_hub.models.resource import Resource
from reform_hub.services.aggregator import (
    FacetSession,
    count_categories,
    count_tags,
    count_themes,
    distinct_locations,
    distinct_types,
    rank_tags,
    rank_themes,
)
from reform_hub.services.result_mapper import map_records


def _resource(**fields) -> Resource:
    fields.setdefault("date", "2024-01-01")
    return Resource(**fields)


class TestRankTags:
    def test_counts_case_insensitively_keeping_first_casing(self) -> None:
        resources = [
            _resource(tags=["Bail", "courts"]),
            _resource(tags=["bail"]),
            _resource(tags=["BAIL", "Courts"]),
        ]
        ranked = rank_tags(resources)
        assert [(c.name, c.count) for c in ranked] == [("Bail", 3), ("courts", 2)]

    def test_ties_keep_first_seen_order(self) -> None:
        resources = [_resource(tags=["zeta", "alpha"]), _resource(tags=["alpha", "zeta"])]
        assert [c.name for c in rank_tags(resources)] == ["zeta", "alpha"]

    def test_mixed_case_keywords_count_per_occurrence(self) -> None:
        resources = map_records(
            [{"source_title": "Health note", "keywords": "Health, health ,  Policy"}]
        )
        assert resources[0].tags == ["Health", "health", "Policy"]
        ranked = rank_tags(resources)
        assert [(c.name, c.count) for c in ranked] == [("Health", 2), ("Policy", 1)]

        resources += map_records([{"source_title": "Policy note", "keywords": "Policy"}])
        ranked = rank_tags(resources)
        assert [(c.name, c.count) for c in ranked] == [("Health", 2), ("Policy", 2)]

    def test_limit_and_href(self) -> None:
        resources = [_resource(tags=[f"Tag {i}" for i in range(20)])]
        ranked = rank_tags(resources, limit=15)
        assert len(ranked) == 15
        assert ranked[0].href == "/tag/tag-0"

    def test_themes_skip_blank(self) -> None:
        resources = [_resource(theme="Courts"), _resource(theme=" "), _resource(theme="courts")]
        ranked = rank_themes(resources)
        assert [(c.name, c.count) for c in ranked] == [("Courts", 2)]


class TestFacetSession:
    def test_types_freeze_after_first_page(self) -> None:
        session = FacetSession()
        assert not session.types_frozen
        first = session.update([_resource(type="Report"), _resource(type="Video")])
        assert first.types == ["Report", "Video"]
        assert session.types_frozen

        second = session.update([_resource(type="Podcast", tags=["new"])])
        assert second.types == ["Report", "Video"]
        assert [c.name for c in second.tags] == ["new"]

    def test_distinct_types_preserves_order(self) -> None:
        resources = [_resource(type="Video"), _resource(type="Report"), _resource(type="Video")]
        assert distinct_types(resources) == ["Video", "Report"]


class TestStoreWideCounts:
    records = [
        {"theme": "Courts", "subTheme": "Bail", "keywords": "bail, remand", "location": "Lagos"},
        {"theme": "Courts", "subTheme": "", "keywords": ["bail"], "location": "Abuja"},
        {"properties": {"theme": "Prisons", "keywords": "overcrowding", "location": "Lagos"}},
        "not-a-record",
    ]

    def test_count_categories_mixes_theme_subtheme_keywords(self) -> None:
        ranked = count_categories(self.records)
        names = {c.name: c.count for c in ranked}
        assert names["Courts"] == 2
        assert names["bail"] == 2
        assert names["Bail"] == 1
        assert len(ranked) <= 6

    def test_count_tags_reads_nested_properties(self) -> None:
        tags = {c.name: c.count for c in count_tags(self.records)}
        assert tags == {"bail": 2, "remand": 1, "overcrowding": 1}

    def test_count_themes_sorted_by_count(self) -> None:
        assert [(c.name, c.count) for c in count_themes(self.records)] == [
            ("Courts", 2),
            ("Prisons", 1),
        ]

    def test_distinct_locations_sorted(self) -> None:
        assert distinct_locations(self.records) == ["Abuja", "Lagos"]
