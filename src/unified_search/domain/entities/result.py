"""
Unified search result entities.

UnifiedResult is the canonical output unit of the engine. Every source matcher
produces UnifiedResult objects, so ranking, filtering, faceting and paging never
need to know which source a result came from.

The payload is a tagged union keyed by source type:

    rag -> RagChunk
    kg  -> KgEntity | KgRelation
    idp -> MetadataEntry | Classification

The engine never interprets the payload; consumers use it to navigate back to
the originating record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from unified_search.core.exceptions import InvalidParameterError
from unified_search.domain.entities.snapshot import (
    Classification,
    KgEntity,
    KgRelation,
    MetadataEntry,
    RagChunk,
)

Payload = RagChunk | KgEntity | KgRelation | MetadataEntry | Classification


class SourceType(str, Enum):
    """Result source types."""

    RAG = "rag"
    KG = "kg"
    IDP = "idp"

    @classmethod
    def coerce(cls, value: SourceType | str) -> SourceType:
        """Accept an enum member or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidParameterError("source_type", value, "one of rag, kg, idp") from None


ALL_SOURCE_TYPES: frozenset[SourceType] = frozenset(SourceType)

# Canonical fusion order
SOURCE_ORDER: tuple[SourceType, ...] = (SourceType.RAG, SourceType.KG, SourceType.IDP)


@dataclass(frozen=True, slots=True)
class Highlight:
    """Highlighted span inside an excerpt, relative to the excerpt text."""

    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Excerpt:
    """Bounded text window explaining why a result matched."""

    field: str
    text: str
    highlights: tuple[Highlight, ...] = ()

    def highlighted_text(self) -> list[str]:
        """The substrings covered by each highlight."""
        return [self.text[h.start : h.end] for h in self.highlights]

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "text": self.text,
            "highlights": [{"start": h.start, "end": h.end} for h in self.highlights],
        }


@dataclass(frozen=True, slots=True)
class ResultMetadata:
    """Display metadata for a result."""

    title: str
    description: str
    origin: str
    timestamp: datetime | None = None
    confidence: float | None = None
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "source": self.origin,
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp.isoformat()
        if self.confidence is not None:
            data["confidence"] = self.confidence
        if self.tags:
            data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True, slots=True)
class UnifiedResult:
    """
    A scored result from any source.

    Attributes:
        id: Globally unique id, "<source>-<localKind>-<localId>"
        source_type: Which source produced the result
        score: Mean per-keyword contribution, always > 0 for emitted results
        metadata: Display metadata
        payload: The originating source record
        matched_fields: Every field that matched, in first-match order
        excerpts: Highlighted text windows
    """

    id: str
    source_type: SourceType
    score: float
    metadata: ResultMetadata
    payload: Payload
    matched_fields: tuple[str, ...] = ()
    excerpts: tuple[Excerpt, ...] = field(default_factory=tuple)

    @property
    def payload_type(self) -> str | None:
        """The payload's own ``type`` field, when it carries one."""
        value = getattr(self.payload, "type", None)
        return value if isinstance(value, str) and value else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "type": self.source_type.value,
            "score": round(self.score, 4),
            "metadata": self.metadata.to_dict(),
            "matched_fields": list(self.matched_fields),
            "excerpts": [e.to_dict() for e in self.excerpts],
        }
