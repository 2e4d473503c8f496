"""
Search suggestions (autocomplete).

Suggests chunk titles, tags, entity names and recent queries that contain the
typed prefix. Ordering: exact match, then prefix match, then shorter values.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from unified_search.domain.entities.result import ALL_SOURCE_TYPES, SourceType
from unified_search.domain.entities.snapshot import SearchableSnapshot

MIN_PREFIX_LENGTH = 2
DEFAULT_SUGGESTION_LIMIT = 10

SuggestionKind = Literal["query", "entity", "tag", "chunk"]


@dataclass(frozen=True, slots=True)
class Suggestion:
    """One autocomplete candidate."""

    value: str
    kind: SuggestionKind
    source: SourceType
    ref: str | None = None


def suggest(
    text: str,
    snapshot: SearchableSnapshot,
    types: Iterable[SourceType] = ALL_SOURCE_TYPES,
    history: Iterable[str] = (),
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[Suggestion]:
    """
    Build autocomplete suggestions for ``text``.

    Args:
        text: What the user has typed so far
        snapshot: Sources to draw suggestions from
        types: Enabled source types
        history: Recent queries, most recent first
        limit: Maximum number of suggestions

    Returns:
        Ranked suggestions (empty for inputs shorter than two characters)
    """
    needle = text.strip().lower()
    if len(needle) < MIN_PREFIX_LENGTH:
        return []

    enabled = set(types)
    candidates: list[Suggestion] = []
    seen_tags: set[str] = set()

    if SourceType.RAG in enabled:
        for chunk in snapshot.rag_chunks:
            if needle in chunk.title.lower():
                candidates.append(Suggestion(chunk.title, "chunk", SourceType.RAG, ref=chunk.id))
            for tag in chunk.tags:
                if needle in tag.lower() and tag not in seen_tags:
                    seen_tags.add(tag)
                    candidates.append(Suggestion(tag, "tag", SourceType.RAG))

    if SourceType.KG in enabled:
        for entity in snapshot.kg_entities:
            if needle in entity.name.lower():
                candidates.append(Suggestion(entity.name, "entity", SourceType.KG, ref=entity.id))

    seen_queries: set[str] = set()
    for past in history:
        key = past.lower()
        if needle in key and key not in seen_queries:
            seen_queries.add(key)
            candidates.append(Suggestion(past, "query", SourceType.RAG))

    candidates.sort(key=lambda s: _rank_key(s.value, needle))
    return candidates[:limit]


def _rank_key(value: str, needle: str) -> tuple[int, int, int]:
    lower = value.lower()
    return (
        0 if lower == needle else 1,
        0 if lower.startswith(needle) else 1,
        len(value),
    )
