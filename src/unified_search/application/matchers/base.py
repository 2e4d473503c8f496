"""
Base Source Matcher - common contract for every result source.

Each matcher takes the keyword list, the query intent and a snapshot and
returns scored UnifiedResult candidates. Matchers hold no mutable state, so the
engine can run them concurrently against a shared snapshot.

Scoring contract:
- every keyword contributes a non-negative weight
- score = total contribution / number of keywords
- a candidate with score 0 is never emitted
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from unified_search.application.search.highlighter import Highlighter
from unified_search.domain.entities.query import QueryIntent
from unified_search.domain.entities.result import SourceType, UnifiedResult
from unified_search.domain.entities.snapshot import SearchableSnapshot

logger = logging.getLogger(__name__)


def contains(haystack: str, keyword: str) -> bool:
    """Case-insensitive substring test."""
    return keyword.lower() in haystack.lower()


def normalize_score(total: float, keyword_count: int) -> float:
    """Mean per-keyword contribution."""
    if keyword_count <= 0:
        return 0.0
    return total / keyword_count


class FieldMatches:
    """Collects matched field names, keeping first-match order without repeats."""

    __slots__ = ("_fields",)

    def __init__(self) -> None:
        self._fields: dict[str, None] = {}

    def add(self, field: str) -> None:
        self._fields.setdefault(field, None)

    def as_tuple(self) -> tuple[str, ...]:
        return tuple(self._fields)

    def __bool__(self) -> bool:
        return bool(self._fields)


class SourceMatcher:
    """
    Base class for source matchers.

    Subclasses set ``source_type`` and implement ``match()``.

    Example:
        class MyMatcher(SourceMatcher):
            source_type = SourceType.RAG

            def match(self, keywords, intent, snapshot):
                return [...]
    """

    source_type: SourceType

    def __init__(self, highlighter: Highlighter | None = None) -> None:
        self._highlighter = highlighter or Highlighter()

    @property
    def highlighter(self) -> Highlighter:
        return self._highlighter

    def match(
        self,
        keywords: Sequence[str],
        intent: QueryIntent,
        snapshot: SearchableSnapshot,
    ) -> list[UnifiedResult]:
        """Return scored candidates for this source."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source_type={self.source_type.value!r})"
