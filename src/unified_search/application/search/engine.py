"""
UnifiedSearchEngine - top-level search orchestration.

Pipeline:

    query text
        │
        ▼
    ┌──────────────────┐
    │  QueryAnalyzer   │  ← intent, candidate sources, keywords, filters
    └────────┬─────────┘
             │
    ┌────────┴────────┐
    ▼        ▼        ▼
   RAG      KG       IDP      ← independent matchers (optionally concurrent)
    │        │        │
    └────────┴────────┘
             │
             ▼
    ┌──────────────────┐
    │   ResultRanker   │  ← fuse + stable sort
    └────────┬─────────┘
             ▼
    filters → facets → pagination → SearchResponse

A matcher that raises is isolated: its failure is logged and reported as a
SourceWarning while the other sources still contribute results. Only when
every eligible source fails does the search itself fail.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from unified_search.application.matchers import (
    DocumentMetadataMatcher,
    KnowledgeGraphMatcher,
    RagMatcher,
    SourceMatcher,
)
from unified_search.application.search.facets import compute_facets
from unified_search.application.search.filters import apply_filters
from unified_search.application.search.pagination import paginate
from unified_search.application.search.query_analyzer import QueryAnalyzer
from unified_search.application.search.result_aggregator import ResultRanker
from unified_search.core.async_utils import gather_with_errors, run_in_thread, timeout_with_fallback
from unified_search.core.exceptions import (
    SnapshotMissingError,
    SourceMatchError,
    create_error_group,
)
from unified_search.domain.entities.query import QueryIntent, SearchFilters, SearchOptions
from unified_search.domain.entities.response import SearchResponse, SourceWarning
from unified_search.domain.entities.result import SOURCE_ORDER, SourceType, UnifiedResult
from unified_search.domain.entities.snapshot import SearchableSnapshot

logger = logging.getLogger(__name__)

_TIMED_OUT = object()


class UnifiedSearchEngine:
    """
    Stateless search service; all collaborators are injected.

    Usage:
        engine = UnifiedSearchEngine()
        response = engine.search("revenue growth", snapshot)

        for result in response.results:
            print(result.id, result.score)

        # Concurrent matchers with a per-matcher timeout
        response = await engine.search_async("revenue growth", snapshot)
    """

    def __init__(
        self,
        analyzer: QueryAnalyzer | None = None,
        matchers: Iterable[SourceMatcher] | None = None,
        ranker: ResultRanker | None = None,
        matcher_timeout: float | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            analyzer: Query analyzer
            matchers: One matcher per source type (defaults to all three)
            ranker: Fusion and ranking service
            matcher_timeout: Seconds allowed per matcher in async mode (None = unbounded)
        """
        self._analyzer = analyzer or QueryAnalyzer()
        self._ranker = ranker or ResultRanker()
        self._matcher_timeout = matcher_timeout
        if matchers is None:
            matchers = (RagMatcher(), KnowledgeGraphMatcher(), DocumentMetadataMatcher())
        self._matchers: dict[SourceType, SourceMatcher] = {m.source_type: m for m in matchers}

    @property
    def analyzer(self) -> QueryAnalyzer:
        return self._analyzer

    # =========================================================================
    # Public API
    # =========================================================================

    def analyze(self, query: str, filters: SearchFilters | None = None) -> QueryIntent:
        """Derive the intent for a query under the given filters' enabled types."""
        filters = filters or SearchFilters()
        return self._analyzer.analyze(query, filters.types)

    def search(
        self,
        query: str,
        snapshot: SearchableSnapshot | None,
        filters: SearchFilters | None = None,
        options: SearchOptions | None = None,
    ) -> SearchResponse:
        """
        Run the full pipeline synchronously.

        Args:
            query: Free-text query
            snapshot: Sources to search
            filters: Caller-held filters (all types enabled by default)
            options: Sort and paging options

        Returns:
            SearchResponse with the requested page and facets

        Raises:
            SnapshotMissingError: If snapshot is None
            InvalidQueryError: If the query has no search terms
            ExceptionGroup: If every eligible source failed
        """
        self._require_snapshot(snapshot)
        filters = filters or SearchFilters()
        intent = self._analyzer.analyze(query, filters.types)
        return self.search_with_intent(intent, snapshot, filters, options)

    def search_with_intent(
        self,
        intent: QueryIntent,
        snapshot: SearchableSnapshot | None,
        filters: SearchFilters | None = None,
        options: SearchOptions | None = None,
    ) -> SearchResponse:
        """Run the pipeline with a previously derived intent."""
        self._require_snapshot(snapshot)
        filters = filters or SearchFilters()
        effective = intent.with_filters(filters)

        per_source: dict[SourceType, list[UnifiedResult]] = {}
        failures: list[SourceMatchError] = []
        for matcher in self._eligible(effective, filters):
            try:
                per_source[matcher.source_type] = matcher.match(effective.keywords, effective, snapshot)
            except Exception as exc:
                failures.append(self._report_failure(matcher.source_type, exc))

        return self._finish(intent, per_source, failures, self._result_filters(effective, filters), options)

    async def search_async(
        self,
        query: str,
        snapshot: SearchableSnapshot | None,
        filters: SearchFilters | None = None,
        options: SearchOptions | None = None,
        intent: QueryIntent | None = None,
    ) -> SearchResponse:
        """
        Run the pipeline with matchers executing concurrently.

        Each matcher runs in a worker thread and is bounded by the configured
        timeout; a matcher that times out contributes no results and a
        "timeout" warning.
        """
        self._require_snapshot(snapshot)
        filters = filters or SearchFilters()
        if intent is None:
            intent = self._analyzer.analyze(query, filters.types)
        effective = intent.with_filters(filters)
        matchers = self._eligible(effective, filters)

        outcomes = await gather_with_errors(
            *(
                timeout_with_fallback(
                    run_in_thread(m.match, effective.keywords, effective, snapshot),
                    self._matcher_timeout,
                    _TIMED_OUT,
                )
                for m in matchers
            ),
            return_exceptions=True,
        )

        per_source: dict[SourceType, list[UnifiedResult]] = {}
        failures: list[SourceMatchError] = []
        timeouts: list[SourceWarning] = []
        for matcher, outcome in zip(matchers, outcomes, strict=True):
            if outcome is _TIMED_OUT:
                logger.warning("%s matcher timed out after %ss", matcher.source_type.value, self._matcher_timeout)
                timeouts.append(
                    SourceWarning(
                        source=matcher.source_type,
                        message=f"{matcher.source_type.value} source timed out",
                        error_type="timeout",
                    )
                )
            elif isinstance(outcome, Exception):
                failures.append(self._report_failure(matcher.source_type, outcome))
            else:
                per_source[matcher.source_type] = outcome  # type: ignore[assignment]

        return self._finish(
            intent,
            per_source,
            failures,
            self._result_filters(effective, filters),
            options,
            extra_warnings=timeouts,
        )

    # =========================================================================
    # Pipeline stages
    # =========================================================================

    def _eligible(self, intent: QueryIntent, filters: SearchFilters) -> list[SourceMatcher]:
        return [
            self._matchers[source]
            for source in SOURCE_ORDER
            if source in self._matchers and intent.searches(source) and source in filters.types
        ]

    @staticmethod
    def _result_filters(effective: QueryIntent, filters: SearchFilters) -> SearchFilters:
        """Caller filters with any date range typed into the query applied."""
        date_range = effective.extracted_filters.date_range
        if date_range is None or date_range == filters.date_range:
            return filters
        return filters.with_date_range(date_range)

    def _finish(
        self,
        intent: QueryIntent,
        per_source: dict[SourceType, list[UnifiedResult]],
        failures: Sequence[SourceMatchError],
        filters: SearchFilters,
        options: SearchOptions | None,
        extra_warnings: Sequence[SourceWarning] = (),
    ) -> SearchResponse:
        options = options or SearchOptions()

        if failures and not per_source and not extra_warnings:
            raise create_error_group("All eligible sources failed", list(failures))

        ranked = self._ranker.rank(self._ranker.fuse(per_source), options)
        filtered = apply_filters(ranked, filters)
        facets = compute_facets(filtered)
        page = paginate(filtered, options.offset, options.limit)

        if not options.highlight_matches:
            page = [replace(r, excerpts=()) for r in page]

        warnings = tuple(
            SourceWarning(
                source=SourceType.coerce(f.context.source or ""),
                message=str(f),
                error_type=type(f.cause).__name__,
            )
            for f in failures
        ) + tuple(extra_warnings)

        logger.debug(
            "Search %r: intent=%s candidates=%d filtered=%d page=%d warnings=%d",
            intent.query,
            intent.primary.value,
            len(ranked),
            len(filtered),
            len(page),
            len(warnings),
        )

        return SearchResponse(
            query=intent.query,
            intent=intent,
            results=tuple(page),
            facets=facets,
            total=len(filtered),
            options=options,
            warnings=warnings,
        )

    @staticmethod
    def _require_snapshot(snapshot: SearchableSnapshot | None) -> None:
        if snapshot is None:
            raise SnapshotMissingError

    @staticmethod
    def _report_failure(source: SourceType, exc: Exception) -> SourceMatchError:
        logger.warning("%s matcher failed: %s", source.value, exc, exc_info=exc)
        return SourceMatchError(source.value, exc)
