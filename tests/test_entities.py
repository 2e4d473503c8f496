"""Tests for query, result and response entities."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from unified_search.core.exceptions import InvalidParameterError
from unified_search.domain.entities.query import (
    DateRange,
    ExtractedFilters,
    QueryIntent,
    QueryIntentType,
    SearchFilters,
    SearchOptions,
    SortBy,
    SortOrder,
)
from unified_search.domain.entities.response import SearchFacets, SearchResponse, SourceWarning
from unified_search.domain.entities.result import (
    Excerpt,
    Highlight,
    ResultMetadata,
    SourceType,
    UnifiedResult,
)
from unified_search.domain.entities.snapshot import KgEntity, RagChunk


# =============================================================================
# Source Types
# =============================================================================


class TestSourceType:
    def test_coerce(self):
        assert SourceType.coerce("KG") is SourceType.KG
        assert SourceType.coerce(SourceType.IDP) is SourceType.IDP

    def test_coerce_unknown(self):
        with pytest.raises(InvalidParameterError):
            SourceType.coerce("web")


# =============================================================================
# Date Ranges
# =============================================================================


class TestDateRange:
    def test_needs_a_bound(self):
        with pytest.raises(InvalidParameterError):
            DateRange()

    def test_start_after_end(self):
        with pytest.raises(InvalidParameterError):
            DateRange(date(2024, 2, 1), date(2024, 1, 1))

    def test_contains_inclusive(self):
        dr = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        assert dr.contains(date(2024, 1, 1))
        assert dr.contains(datetime(2024, 1, 31, 23, 59))
        assert not dr.contains(date(2024, 2, 1))

    def test_open_start(self):
        dr = DateRange(end=date(2024, 1, 1))
        assert dr.contains(date(1999, 1, 1))
        assert not dr.contains(date(2024, 1, 2))


# =============================================================================
# Filters
# =============================================================================


class TestSearchFilters:
    def test_defaults(self):
        filters = SearchFilters()
        assert filters.types == {SourceType.RAG, SourceType.KG, SourceType.IDP}
        assert filters.min_score is None

    def test_types_coerced(self):
        assert SearchFilters(types=["rag", "kg"]).types == {SourceType.RAG, SourceType.KG}

    def test_empty_types_rejected(self):
        with pytest.raises(InvalidParameterError):
            SearchFilters(types=set())

    def test_negative_min_score_rejected(self):
        with pytest.raises(InvalidParameterError):
            SearchFilters(min_score=-0.5)

    def test_entity_types_uppercased(self):
        filters = SearchFilters(entity_types={"org"}).with_entity_type("person")
        assert filters.entity_types == {"ORG", "PERSON"}
        assert filters.without_entity_type("Org").entity_types == {"PERSON"}

    def test_toggles_return_new_objects(self):
        filters = SearchFilters()
        toggled = filters.toggle_type("kg")
        assert SourceType.KG in filters.types
        assert SourceType.KG not in toggled.types
        assert SourceType.KG in toggled.toggle_type("kg").types

    def test_with_min_score_and_date_range(self):
        dr = DateRange(start=date(2024, 1, 1))
        filters = SearchFilters().with_min_score(1.0).with_date_range(dr)
        assert filters.min_score == 1.0
        assert filters.date_range == dr

    def test_cleared_keeps_types(self):
        filters = SearchFilters(types={"kg"}, tags={"x"}, min_score=2.0)
        assert filters.cleared() == SearchFilters(types={"kg"})


# =============================================================================
# Options
# =============================================================================


class TestSearchOptions:
    def test_defaults(self):
        options = SearchOptions()
        assert options.limit == 20
        assert options.offset == 0
        assert options.sort_by is SortBy.RELEVANCE
        assert options.sort_order is SortOrder.DESC
        assert options.highlight_matches

    def test_string_coercion(self):
        options = SearchOptions(sort_by="Confidence", sort_order="ASC")
        assert options.sort_by is SortBy.CONFIDENCE
        assert options.sort_order is SortOrder.ASC

    @pytest.mark.parametrize(
        ("kwargs", "param"),
        [
            ({"sort_by": "popularity"}, "sort_by"),
            ({"sort_order": "sideways"}, "sort_order"),
            ({"limit": -1}, "limit"),
            ({"offset": -1}, "offset"),
        ],
    )
    def test_invalid(self, kwargs, param):
        with pytest.raises(InvalidParameterError) as exc_info:
            SearchOptions(**kwargs)
        assert exc_info.value.param_name == param

    def test_merged_ignores_none(self):
        options = SearchOptions(limit=5)
        merged = options.merged(limit=None, offset=10)
        assert merged.limit == 5
        assert merged.offset == 10
        assert options.merged() is options


# =============================================================================
# Intent
# =============================================================================


class TestQueryIntent:
    @pytest.fixture
    def intent(self):
        return QueryIntent(
            query="acme",
            primary=QueryIntentType.SEARCH,
            candidate_sources=frozenset(SourceType),
            keywords=("acme",),
        )

    def test_caller_filters_fill_gaps(self, intent):
        dr = DateRange(start=date(2024, 1, 1))
        merged = intent.with_filters(SearchFilters(date_range=dr, entity_types={"ORG"}))
        assert merged.extracted_filters == ExtractedFilters(date_range=dr, entity_types=frozenset({"ORG"}))
        assert intent.extracted_filters.is_empty

    def test_query_filters_win(self, intent):
        query_range = DateRange(end=date(2020, 1, 1))
        typed = QueryIntent(
            query=intent.query,
            primary=intent.primary,
            candidate_sources=intent.candidate_sources,
            keywords=intent.keywords,
            extracted_filters=ExtractedFilters(date_range=query_range, entity_types=frozenset({"PERSON"})),
        )
        merged = typed.with_filters(
            SearchFilters(date_range=DateRange(start=date(2024, 1, 1)), entity_types={"ORG"})
        )
        assert merged.extracted_filters.date_range == query_range
        assert merged.extracted_filters.entity_types == {"PERSON"}

    def test_unchanged_returns_self(self, intent):
        assert intent.with_filters(SearchFilters()) is intent


# =============================================================================
# Results and Responses
# =============================================================================


def _result(payload=None, **metadata):
    return UnifiedResult(
        id="kg-entity-1",
        source_type=SourceType.KG,
        score=1.23456,
        metadata=ResultMetadata(title="Acme", description="ORG entity", origin="Knowledge Graph", **metadata),
        payload=payload or KgEntity(id="1", name="Acme", type="ORG"),
        matched_fields=("name",),
        excerpts=(Excerpt("name", "Acme", (Highlight(0, 4),)),),
    )


class TestUnifiedResult:
    def test_payload_type(self):
        assert _result().payload_type == "ORG"
        assert _result(payload=RagChunk(id="c", title="", content="")).payload_type is None

    def test_to_dict(self):
        data = _result(confidence=0.9, timestamp=datetime(2024, 1, 1)).to_dict()
        assert data["id"] == "kg-entity-1"
        assert data["type"] == "kg"
        assert data["score"] == 1.2346
        assert data["metadata"]["source"] == "Knowledge Graph"
        assert data["metadata"]["confidence"] == 0.9
        assert data["metadata"]["timestamp"] == "2024-01-01T00:00:00"
        assert data["excerpts"] == [{"field": "name", "text": "Acme", "highlights": [{"start": 0, "end": 4}]}]

    def test_highlighted_text(self):
        excerpt = Excerpt("content", "Revenue grew", (Highlight(0, 7), Highlight(8, 12)))
        assert excerpt.highlighted_text() == ["Revenue", "grew"]


class TestSearchResponse:
    def test_has_more(self):
        intent = QueryIntent("acme", QueryIntentType.SEARCH, frozenset(SourceType), ("acme",))
        response = SearchResponse(
            query="acme",
            intent=intent,
            results=(_result(),),
            facets=SearchFacets(),
            total=3,
            options=SearchOptions(limit=1, offset=1),
            warnings=(SourceWarning(SourceType.RAG, "rag matcher failed"),),
        )
        assert response.has_more
        assert response.has_warnings
        assert not response.is_empty

        data = response.to_dict()
        assert data["offset"] == 1
        assert data["warnings"] == [{"source": "rag", "message": "rag matcher failed", "error_type": "error"}]
