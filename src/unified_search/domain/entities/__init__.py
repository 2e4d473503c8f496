"""Domain entities for unified search."""

from __future__ import annotations

from .query import (
    DEFAULT_LIMIT,
    DateRange,
    ExtractedFilters,
    QueryIntent,
    QueryIntentType,
    SearchFilters,
    SearchOptions,
    SortBy,
    SortOrder,
)
from .response import SearchFacets, SearchResponse, SourceWarning
from .result import (
    ALL_SOURCE_TYPES,
    SOURCE_ORDER,
    Excerpt,
    Highlight,
    Payload,
    ResultMetadata,
    SourceType,
    UnifiedResult,
)
from .snapshot import (
    Classification,
    KgEntity,
    KgRelation,
    MetadataEntry,
    RagChunk,
    SearchableSnapshot,
)

__all__ = [
    # Snapshot
    "SearchableSnapshot",
    "RagChunk",
    "KgEntity",
    "KgRelation",
    "MetadataEntry",
    "Classification",
    # Results
    "SourceType",
    "ALL_SOURCE_TYPES",
    "SOURCE_ORDER",
    "UnifiedResult",
    "ResultMetadata",
    "Excerpt",
    "Highlight",
    "Payload",
    # Query
    "QueryIntent",
    "QueryIntentType",
    "ExtractedFilters",
    "DateRange",
    "SearchFilters",
    "SearchOptions",
    "SortBy",
    "SortOrder",
    "DEFAULT_LIMIT",
    # Response
    "SearchResponse",
    "SearchFacets",
    "SourceWarning",
]
