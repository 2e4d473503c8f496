"""
Unified Search - one ranked result list over RAG chunks, a knowledge graph
and extracted document metadata.

Usage:
    from unified_search import SearchableSnapshot, UnifiedSearchEngine

    snapshot = SearchableSnapshot.from_dict(payload)
    engine = UnifiedSearchEngine()
    response = engine.search("revenue after 2024-01-01", snapshot)

    for result in response.results:
        print(f"{result.id}: {result.metadata.title} ({result.score:.2f})")

Features:
    - Intent classification routes queries to the relevant sources
    - Inline filters: ``after/before/since/until YYYY-MM-DD`` and ``type:NAME``
    - Stable multi-key ranking, post-hoc filters, facets and pagination
    - Bounded excerpts with highlight ranges
    - Per-source failure isolation and optional concurrent matching
"""

from .application import (
    DocumentMetadataMatcher,
    Highlighter,
    KnowledgeGraphMatcher,
    QueryAnalyzer,
    RagMatcher,
    ResultRanker,
    SearchSession,
    SourceMatcher,
    UnifiedSearchEngine,
)
from .config import SearchSettings, configure_logging
from .core.exceptions import (
    InvalidParameterError,
    InvalidQueryError,
    SnapshotMissingError,
    UnifiedSearchError,
)
from .domain.entities import (
    QueryIntent,
    QueryIntentType,
    SearchableSnapshot,
    SearchFacets,
    SearchFilters,
    SearchOptions,
    SearchResponse,
    SortBy,
    SortOrder,
    SourceType,
    UnifiedResult,
)

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "UnifiedSearchEngine",
    "SearchSession",
    "SearchSettings",
    "configure_logging",
    # Entities
    "SearchableSnapshot",
    "SourceType",
    "UnifiedResult",
    "QueryIntent",
    "QueryIntentType",
    "SearchFilters",
    "SearchOptions",
    "SortBy",
    "SortOrder",
    "SearchResponse",
    "SearchFacets",
    # Components
    "QueryAnalyzer",
    "Highlighter",
    "ResultRanker",
    "SourceMatcher",
    "RagMatcher",
    "KnowledgeGraphMatcher",
    "DocumentMetadataMatcher",
    # Errors
    "UnifiedSearchError",
    "InvalidQueryError",
    "InvalidParameterError",
    "SnapshotMissingError",
]
