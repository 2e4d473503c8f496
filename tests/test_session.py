"""Tests for SearchSession - caller-held search state."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from unified_search.application.matchers import SourceMatcher
from unified_search.application.search.engine import UnifiedSearchEngine
from unified_search.application.session.manager import SearchSession
from unified_search.core.exceptions import (
    InvalidParameterError,
    InvalidQueryError,
    SnapshotMissingError,
)
from unified_search.domain.entities.query import SearchFilters, SearchOptions, SortBy
from unified_search.domain.entities.result import SourceType


class ExplodingRagMatcher(SourceMatcher):
    source_type = SourceType.RAG

    def match(self, keywords, intent, snapshot):
        raise RuntimeError("index unavailable")


@pytest.fixture
def session(engine, sample_snapshot):
    return SearchSession(engine, sample_snapshot)


@pytest.fixture
def spy_engine(engine):
    """Engine whose analyze() calls are counted."""
    engine.analyze = MagicMock(wraps=engine.analyze)
    return engine


# ============================================================================
# State
# ============================================================================


class TestSessionState:
    def test_initial_state(self, session):
        assert session.query == ""
        assert session.response is None
        assert session.error is None
        assert not session.is_searching
        assert session.results == ()
        assert session.filters == SearchFilters()
        assert session.options == SearchOptions()

    def test_setters(self, session):
        session.set_query("acme")
        session.set_filters(SearchFilters(min_score=1.0))
        session.set_options(SearchOptions(limit=5))

        assert session.query == "acme"
        assert session.filters.min_score == 1.0
        assert session.options.limit == 5

    def test_toggle_type(self, session):
        filters = session.toggle_type("rag")
        assert SourceType.RAG not in filters.types
        assert session.toggle_type(SourceType.RAG).types == {SourceType.RAG, SourceType.KG, SourceType.IDP}

    def test_cannot_disable_last_type(self, session):
        session.set_filters(SearchFilters(types={SourceType.KG}))
        with pytest.raises(InvalidParameterError):
            session.toggle_type(SourceType.KG)
        assert session.filters.types == {SourceType.KG}

    def test_tags(self, session):
        session.add_tag("finance")
        session.add_tag("risk")
        session.remove_tag("finance")
        assert session.filters.tags == {"risk"}


# ============================================================================
# Synchronous Search
# ============================================================================


class TestSessionSearch:
    def test_search(self, session):
        response = session.search("revenue")

        assert response is session.response
        assert [r.id for r in session.results] == ["rag-chunk-c1", "rag-chunk-c3"]
        assert session.error is None
        assert not session.is_searching

    def test_reuses_current_query(self, session):
        session.set_query("revenue")
        assert session.search() is not None

    def test_empty_query_clears_without_error(self, session):
        session.search("revenue")
        assert session.search("   ") is None
        assert session.response is None
        assert session.error is None

    def test_no_results_is_not_an_error(self, session):
        response = session.search("zzzz")
        assert response.is_empty
        assert session.error is None

    def test_failure_sets_error_state(self, engine):
        session = SearchSession(engine, snapshot=None)
        assert session.search("revenue") is None
        assert isinstance(session.error, SnapshotMissingError)
        assert session.response is None

    def test_invalid_query_sets_error_state(self, session):
        session.search("revenue")
        assert session.search("type:org") is None
        assert isinstance(session.error, InvalidQueryError)
        assert session.results == ()

    def test_error_cleared_by_next_success(self, session):
        session.search("type:org")
        session.search("revenue")
        assert session.error is None

    def test_option_overrides_persist(self, session):
        session.search("revenue", sort_by="date", limit=1)
        assert session.options.sort_by is SortBy.DATE
        assert session.options.limit == 1
        assert len(session.results) == 1

    def test_filters_apply(self, session):
        session.toggle_type("rag")
        assert session.search("acme").results
        assert all(r.source_type is SourceType.KG for r in session.results)

    def test_history_most_recent_first(self, session):
        session.search("revenue")
        session.search("acme")
        session.search("revenue")
        assert list(session.history) == ["revenue", "acme"]

    def test_history_bounded(self, engine, sample_snapshot):
        session = SearchSession(engine, sample_snapshot, history_size=2)
        for query in ("revenue", "acme", "globex"):
            session.search(query)
        assert list(session.history) == ["globex", "acme"]

    def test_clear(self, session):
        session.search("revenue")
        session.highlight_result("rag-chunk-c1")
        session.clear()
        assert session.query == ""
        assert session.response is None
        assert session.highlighted_id is None


# ============================================================================
# Intent Memoisation
# ============================================================================


class TestIntentCache:
    def test_option_changes_do_not_reanalyze(self, spy_engine, sample_snapshot):
        session = SearchSession(spy_engine, sample_snapshot)

        session.search("revenue")
        session.search(sort_by="date")
        session.search(offset=1)
        session.add_tag("finance")
        session.search()

        assert spy_engine.analyze.call_count == 1

    def test_type_toggle_reanalyzes(self, spy_engine, sample_snapshot):
        session = SearchSession(spy_engine, sample_snapshot)

        session.search("revenue")
        session.toggle_type("idp")
        session.search()

        assert spy_engine.analyze.call_count == 2

    def test_cache_bounded(self, spy_engine, sample_snapshot):
        session = SearchSession(spy_engine, sample_snapshot, intent_cache_size=1)

        session.search("revenue")
        session.search("acme")
        session.search("revenue")

        assert spy_engine.analyze.call_count == 3


# ============================================================================
# Async Search and Superseding
# ============================================================================


class TestSessionSearchAsync:
    async def test_search_async(self, session):
        response = await session.search_async("acme")
        assert response is session.response
        assert not session.is_searching

    async def test_newer_search_supersedes(self, session):
        first, second = await asyncio.gather(
            session.search_async("revenue"),
            session.search_async("acme"),
        )

        assert first is None
        assert second is not None
        assert session.response is second
        assert session.query == "acme"
        assert list(session.history) == ["acme"]
        assert not session.is_searching

    async def test_superseded_failure_does_not_set_error(self, sample_snapshot):
        # Only a failing RAG matcher: "revenue" fails, the entity query has no eligible source
        engine = UnifiedSearchEngine(matchers=[ExplodingRagMatcher()])
        session = SearchSession(engine, sample_snapshot)

        stale, latest = await asyncio.gather(
            session.search_async("revenue"),
            session.search_async("who is Acme"),
        )

        assert stale is None
        assert latest is not None
        assert session.error is None
        assert session.response is latest

    async def test_async_failure_sets_error(self, engine):
        session = SearchSession(engine, snapshot=None)
        assert await session.search_async("revenue") is None
        assert isinstance(session.error, SnapshotMissingError)

    async def test_unexpected_error_resets_searching(self, sample_snapshot):
        class BrokenEngine(UnifiedSearchEngine):
            async def search_async(self, *args, **kwargs):
                raise KeyError("missing")

        session = SearchSession(BrokenEngine(), sample_snapshot)

        with pytest.raises(KeyError):
            await session.search_async("revenue")

        assert not session.is_searching

    async def test_debounce_runs_only_last(self, spy_engine, sample_snapshot):
        session = SearchSession(spy_engine, sample_snapshot)

        results = await asyncio.gather(
            session.search_debounced("re", delay=0.01),
            session.search_debounced("rev", delay=0.01),
            session.search_debounced("revenue", delay=0.01),
        )

        assert results[0] is None
        assert results[1] is None
        assert results[2] is not None
        assert session.query == "revenue"
        assert list(session.history) == ["revenue"]
        spy_engine.analyze.assert_called_once()

    async def test_debounce_uses_configured_delay(self, engine, sample_snapshot):
        session = SearchSession(engine, sample_snapshot, debounce_seconds=0.0)
        assert await session.search_debounced("revenue") is not None

    async def test_sync_search_supersedes_pending_debounce(self, session):
        pending = asyncio.create_task(session.search_debounced("revenue", delay=0.05))
        await asyncio.sleep(0)
        session.search("acme")

        assert await pending is None
        assert session.query == "acme"


# ============================================================================
# Highlighting and Suggestions
# ============================================================================


class TestHighlighting:
    def test_highlight_lifecycle(self, session):
        assert not session.is_highlighted("rag-chunk-c1")

        session.highlight_result("rag-chunk-c1")
        assert session.is_highlighted("rag-chunk-c1")
        assert not session.is_highlighted("rag-chunk-c3")

        session.highlight_result("rag-chunk-c3")
        assert not session.is_highlighted("rag-chunk-c1")

        session.clear_highlights()
        assert session.highlighted_id is None


class TestSessionSuggest:
    def test_includes_history(self, session):
        session.search("acme revenue")
        values = [s.value for s in session.suggest("acme")]
        assert "Acme Corp" in values
        assert "acme revenue" in values

    def test_respects_enabled_types(self, session):
        session.toggle_type("kg")
        assert "Acme Corp" not in [s.value for s in session.suggest("acme")]

    def test_no_snapshot(self, engine):
        assert SearchSession(engine).suggest("acme") == []

    def test_limit(self, engine, sample_snapshot):
        session = SearchSession(engine, sample_snapshot, suggestion_limit=1)
        session.search("revenue")
        assert len(session.suggest("re", limit=5)) == 2
        assert len(session.suggest("re")) == 1
