"""
Unified Search pipeline stages.

Key Components:
- QueryAnalyzer: classifies the query and extracts keywords and filters
- Highlighter: builds bounded excerpts with highlight ranges
- ResultRanker: fuses per-source lists and sorts them stably
- apply_filters / paginate / compute_facets: post-ranking stages
- suggest: autocomplete over the snapshot and query history

The orchestrating UnifiedSearchEngine lives in
``unified_search.application.search.engine``; it depends on the matchers,
which in turn use the Highlighter from this package.
"""

from __future__ import annotations

from .facets import compute_facets
from .filters import apply_filters, matches_filters
from .highlighter import DEFAULT_RADIUS, MAX_EXCERPT_LENGTH, Highlighter, find_occurrence
from .pagination import paginate
from .query_analyzer import QueryAnalyzer
from .result_aggregator import ResultRanker, rank_results
from .suggestions import Suggestion, suggest

__all__ = [
    "QueryAnalyzer",
    "Highlighter",
    "find_occurrence",
    "DEFAULT_RADIUS",
    "MAX_EXCERPT_LENGTH",
    "ResultRanker",
    "rank_results",
    "apply_filters",
    "matches_filters",
    "paginate",
    "compute_facets",
    "Suggestion",
    "suggest",
]
