"""
Domain Layer - Core Search Entities

Contains:
- entities: snapshot records, unified results, query intent, filters, options
"""

from .entities import (
    QueryIntent,
    SearchableSnapshot,
    SearchFacets,
    SearchFilters,
    SearchOptions,
    SearchResponse,
    SourceType,
    UnifiedResult,
)

__all__ = [
    "SearchableSnapshot",
    "SourceType",
    "UnifiedResult",
    "QueryIntent",
    "SearchFilters",
    "SearchOptions",
    "SearchResponse",
    "SearchFacets",
]
