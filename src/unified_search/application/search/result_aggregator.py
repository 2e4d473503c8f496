"""
ResultRanker - Cross-Source Result Fusion and Ranking

This module merges per-source candidate lists into one list and orders it:
1. Fusion: concatenate candidates in canonical source order (rag, kg, idp)
2. Ranking: stable sort by relevance, confidence, type or date

Architecture Decision:
    ResultRanker operates on UnifiedResult objects only and never rescores
    them; the score produced by a matcher is final.

    Sorting is stable, so results with equal keys keep their fused order.
    Ascending order reverses the natural (descending) output rather than
    re-sorting with swapped operands.

Example:
    >>> ranker = ResultRanker()
    >>> fused = ranker.fuse({SourceType.KG: kg_results, SourceType.RAG: rag_results})
    >>> ranked = ranker.rank(fused, SearchOptions(sort_by=SortBy.CONFIDENCE))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime

from unified_search.domain.entities.query import SearchOptions, SortBy, SortOrder
from unified_search.domain.entities.result import SOURCE_ORDER, SourceType, UnifiedResult

logger = logging.getLogger(__name__)

_EPOCH = 0.0


def _timestamp_key(result: UnifiedResult) -> float:
    ts: datetime | None = result.metadata.timestamp
    if ts is None:
        return _EPOCH
    return ts.timestamp()


# Natural ordering per sort key: (key function, descending?)
SORT_KEYS: dict[SortBy, tuple[Callable[[UnifiedResult], object], bool]] = {
    SortBy.RELEVANCE: (lambda r: r.score, True),
    SortBy.CONFIDENCE: (lambda r: r.metadata.confidence or 0.0, True),
    SortBy.TYPE: (lambda r: r.source_type.value, False),
    SortBy.DATE: (_timestamp_key, True),
}


class ResultRanker:
    """
    Fuses and ranks results from multiple sources.

    Usage:
        ranker = ResultRanker()
        fused = ranker.fuse(per_source_results)
        ranked = ranker.rank(fused, options)
    """

    def fuse(
        self,
        per_source: Mapping[SourceType, Sequence[UnifiedResult]],
    ) -> list[UnifiedResult]:
        """
        Concatenate per-source results in canonical source order.

        Args:
            per_source: Results keyed by the source that produced them

        Returns:
            One list; order does not depend on which matcher finished first
        """
        fused: list[UnifiedResult] = []
        for source in SOURCE_ORDER:
            fused.extend(per_source.get(source, ()))
        return fused

    def rank(
        self,
        results: Sequence[UnifiedResult],
        options: SearchOptions | None = None,
    ) -> list[UnifiedResult]:
        """
        Sort results for the requested key and order.

        Args:
            results: Fused results
            options: Sort options (relevance, descending by default)

        Returns:
            New sorted list; the input is left untouched
        """
        options = options or SearchOptions()
        key, descending = SORT_KEYS[options.sort_by]

        # sorted() is stable in both directions
        ranked = sorted(results, key=key, reverse=descending)  # type: ignore[arg-type]

        if options.sort_order is SortOrder.ASC:
            ranked.reverse()
        return ranked

    def fuse_and_rank(
        self,
        per_source: Mapping[SourceType, Sequence[UnifiedResult]],
        options: SearchOptions | None = None,
    ) -> list[UnifiedResult]:
        """Convenience method: fuse and rank in one call."""
        return self.rank(self.fuse(per_source), options)


def rank_results(
    results: Sequence[UnifiedResult],
    options: SearchOptions | None = None,
) -> list[UnifiedResult]:
    """Rank results with a default ResultRanker."""
    return ResultRanker().rank(results, options)
