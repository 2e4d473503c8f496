"""
Search response entities.

A SearchResponse carries the current page, facets over the full filtered set,
and any non-fatal per-source warnings. An empty response with no warnings means
"no results", which consumers must not render as a failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from unified_search.domain.entities.query import QueryIntent, SearchOptions
from unified_search.domain.entities.result import SOURCE_ORDER, SourceType, UnifiedResult


@dataclass(frozen=True, slots=True)
class SourceWarning:
    """A source that failed or timed out while the rest of the search succeeded."""

    source: SourceType
    message: str
    error_type: str = "error"

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source.value, "message": self.message, "error_type": self.error_type}


@dataclass(frozen=True, slots=True)
class SearchFacets:
    """Aggregate counts used to drive filter widgets."""

    types: dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in SOURCE_ORDER})
    tags: dict[str, int] = field(default_factory=dict)
    entity_types: dict[str, int] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> SearchFacets:
        return cls()

    @property
    def is_zero(self) -> bool:
        return not any(self.types.values()) and not self.tags and not self.entity_types

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "types": dict(self.types),
            "tags": dict(self.tags),
            "entity_types": dict(self.entity_types),
        }


@dataclass(frozen=True, slots=True)
class SearchResponse:
    """One page of results for a query."""

    query: str
    intent: QueryIntent
    results: tuple[UnifiedResult, ...]
    facets: SearchFacets
    total: int
    options: SearchOptions
    warnings: tuple[SourceWarning, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def has_more(self) -> bool:
        return self.options.offset + len(self.results) < self.total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "query": self.query,
            "intent": self.intent.to_dict(),
            "total": self.total,
            "offset": self.options.offset,
            "limit": self.options.limit,
            "results": [r.to_dict() for r in self.results],
            "facets": self.facets.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
        }
