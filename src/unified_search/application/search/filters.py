"""
Filter Engine - post-hoc predicate filtering of ranked results.

A single order-preserving pass. Applying the same filters twice yields the
same list as applying them once.

Entity-type filtering is not repeated here; the knowledge-graph matcher
applies it while scoring.
"""

from __future__ import annotations

from collections.abc import Sequence

from unified_search.domain.entities.query import SearchFilters
from unified_search.domain.entities.result import SourceType, UnifiedResult
from unified_search.domain.entities.snapshot import RagChunk


def matches_filters(result: UnifiedResult, filters: SearchFilters) -> bool:
    """Whether a single result passes every filter."""
    if result.source_type not in filters.types:
        return False

    if filters.min_score is not None and result.score < filters.min_score:
        return False

    # Undated results always pass the date filter
    timestamp = result.metadata.timestamp
    if filters.date_range is not None and timestamp is not None:
        if not filters.date_range.contains(timestamp):
            return False

    if filters.tags and filters.tags.isdisjoint(result.metadata.tags):
        return False

    if filters.chunk_indices and result.source_type is SourceType.RAG:
        payload = result.payload
        if isinstance(payload, RagChunk) and payload.chunk_index not in filters.chunk_indices:
            return False

    return True


def apply_filters(
    results: Sequence[UnifiedResult],
    filters: SearchFilters | None,
) -> list[UnifiedResult]:
    """
    Apply filters to results.

    Args:
        results: Ranked results
        filters: Filters to apply (None keeps everything)

    Returns:
        New list of passing results, in input order
    """
    if filters is None:
        return list(results)
    return [r for r in results if matches_filters(r, filters)]
