"""
Query-side entities: intent, filters and options.

QueryIntent is derived once per query by the QueryAnalyzer and never mutated.
SearchFilters and SearchOptions are caller-held state; they are frozen and
every toggle returns a new object, so a search pass always reads a stable view.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar

from unified_search.core.exceptions import InvalidParameterError
from unified_search.domain.entities.result import ALL_SOURCE_TYPES, SourceType


class QueryIntentType(Enum):
    """
    Classified purpose of a query.

    SEARCH: general search over every enabled source
    ENTITY: entity lookup ("who", "company", ...), knowledge graph only
    RELATIONSHIP: relationship lookup ("how", "between", ...), graph + chunks
    METADATA: document-metadata lookup ("field", "property", ...)
    """

    SEARCH = "search"
    ENTITY = "entity"
    RELATIONSHIP = "relationship"
    METADATA = "metadata"


class SortBy(Enum):
    """Sort keys for ranked results."""

    RELEVANCE = "relevance"
    DATE = "date"
    TYPE = "type"
    CONFIDENCE = "confidence"


class SortOrder(Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive date range; either side may be open."""

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        if self.start is None and self.end is None:
            msg = "DateRange needs at least one bound"
            raise InvalidParameterError("date_range", self, msg)
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidParameterError("date_range", self, "start <= end")

    def contains(self, moment: datetime | date) -> bool:
        day = moment.date() if isinstance(moment, datetime) else moment
        if self.start is not None and day < self.start:
            return False
        return not (self.end is not None and day > self.end)

    def to_dict(self) -> dict[str, str | None]:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


@dataclass(frozen=True, slots=True)
class ExtractedFilters:
    """Filters parsed out of the query text."""

    date_range: DateRange | None = None
    entity_types: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return self.date_range is None and not self.entity_types


@dataclass(frozen=True, slots=True)
class QueryIntent:
    """Result of query analysis."""

    query: str
    primary: QueryIntentType
    candidate_sources: frozenset[SourceType]
    keywords: tuple[str, ...]
    terms: tuple[str, ...] = ()
    extracted_filters: ExtractedFilters = field(default_factory=ExtractedFilters)

    def searches(self, source: SourceType) -> bool:
        """Whether this intent targets the given source."""
        return source in self.candidate_sources

    def with_filters(self, filters: SearchFilters) -> QueryIntent:
        """
        Return an intent whose extracted filters fall back to the caller's.

        Filters typed into the query win; caller-held filters fill the gaps.
        The receiver is left untouched.
        """
        extracted = self.extracted_filters
        merged = ExtractedFilters(
            date_range=extracted.date_range or filters.date_range,
            entity_types=extracted.entity_types or filters.entity_types,
        )
        if merged == extracted:
            return self
        return replace(self, extracted_filters=merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        extracted = self.extracted_filters
        return {
            "query": self.query,
            "primary": self.primary.value,
            "candidate_sources": sorted(s.value for s in self.candidate_sources),
            "keywords": list(self.keywords),
            "filters": {
                "date_range": extracted.date_range.to_dict() if extracted.date_range else None,
                "entity_types": sorted(extracted.entity_types),
            },
        }


@dataclass(frozen=True, slots=True)
class SearchFilters:
    """
    Post-hoc result filters.

    Attributes:
        types: Enabled source types (never empty)
        date_range: Drop dated results outside the range
        min_score: Drop results scoring below this value (inclusive bound)
        tags: Keep only results sharing at least one tag
        entity_types: Knowledge-graph entity types to keep (applied by the KG matcher)
        chunk_indices: Keep only RAG results from these chunk positions
    """

    types: frozenset[SourceType] = ALL_SOURCE_TYPES
    date_range: DateRange | None = None
    min_score: float | None = None
    tags: frozenset[str] = frozenset()
    entity_types: frozenset[str] = frozenset()
    chunk_indices: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        types = frozenset(SourceType.coerce(t) for t in self.types)
        if not types:
            raise InvalidParameterError("types", set(), "at least one source type")
        if self.min_score is not None and self.min_score < 0:
            raise InvalidParameterError("min_score", self.min_score, "a non-negative number")
        object.__setattr__(self, "types", types)
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "entity_types", frozenset(t.upper() for t in self.entity_types))
        object.__setattr__(self, "chunk_indices", frozenset(self.chunk_indices))

    # -- toggles ------------------------------------------------------------

    def toggle_type(self, source: SourceType | str) -> SearchFilters:
        source = SourceType.coerce(source)
        types = self.types - {source} if source in self.types else self.types | {source}
        return replace(self, types=types)

    def with_tag(self, tag: str) -> SearchFilters:
        return replace(self, tags=self.tags | {tag})

    def without_tag(self, tag: str) -> SearchFilters:
        return replace(self, tags=self.tags - {tag})

    def with_entity_type(self, entity_type: str) -> SearchFilters:
        return replace(self, entity_types=self.entity_types | {entity_type.upper()})

    def without_entity_type(self, entity_type: str) -> SearchFilters:
        return replace(self, entity_types=self.entity_types - {entity_type.upper()})

    def with_min_score(self, min_score: float | None) -> SearchFilters:
        return replace(self, min_score=min_score)

    def with_date_range(self, date_range: DateRange | None) -> SearchFilters:
        return replace(self, date_range=date_range)

    def cleared(self) -> SearchFilters:
        """Keep the enabled types, drop every other filter."""
        return SearchFilters(types=self.types)


DEFAULT_LIMIT = 20


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Ranking and paging options."""

    limit: int = DEFAULT_LIMIT
    offset: int = 0
    sort_by: SortBy = SortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESC
    highlight_matches: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort_by", _coerce_enum(SortBy, self.sort_by, "sort_by"))
        object.__setattr__(self, "sort_order", _coerce_enum(SortOrder, self.sort_order, "sort_order"))
        if not isinstance(self.limit, int) or self.limit < 0:
            raise InvalidParameterError("limit", self.limit, "a non-negative integer")
        if not isinstance(self.offset, int) or self.offset < 0:
            raise InvalidParameterError("offset", self.offset, "a non-negative integer")

    def merged(self, **overrides: Any) -> SearchOptions:
        """Return new options; only keys given (and not None) override."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: type[E], value: E | str, name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        expected = "one of " + ", ".join(m.value for m in enum_cls)
        raise InvalidParameterError(name, value, expected) from None
