"""
Searchable snapshot entities.

A SearchableSnapshot is the frozen, caller-supplied view of the three source
datasets at query time:

- RAG chunks produced by the external chunking process
- Knowledge-graph entities and relations produced by the extraction process
- Extracted-document (IDP) metadata and classification labels

Every collection is copied into a tuple or read-only mapping when the snapshot
is built, so a snapshot can be shared by concurrent matchers and concurrent
queries without locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, TypeVar

from unified_search.core.exceptions import SnapshotDataError

Scalar = str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class RagChunk:
    """A segment of source-document text."""

    id: str
    title: str
    content: str
    chunk_index: int = 0
    token_count: int = 0
    tags: tuple[str, ...] = ()
    timestamp: datetime | None = None


@dataclass(frozen=True, slots=True)
class KgEntity:
    """Knowledge-graph node."""

    id: str
    name: str
    type: str
    confidence: float = 1.0


@dataclass(frozen=True, slots=True)
class KgRelation:
    """Typed knowledge-graph edge between two entities."""

    source_entity_id: str
    target_entity_id: str
    type: str
    confidence: float = 1.0


@dataclass(frozen=True, slots=True)
class MetadataEntry:
    """One extracted-document metadata field."""

    key: str
    value: Scalar


@dataclass(frozen=True, slots=True)
class Classification:
    """One document classification label and its position in the label list."""

    label: str
    index: int


@dataclass(frozen=True)
class SearchableSnapshot:
    """Immutable view of all searchable sources."""

    rag_chunks: tuple[RagChunk, ...] = ()
    kg_entities: tuple[KgEntity, ...] = ()
    kg_relations: tuple[KgRelation, ...] = ()
    idp_metadata: Mapping[str, Scalar] = field(default_factory=lambda: MappingProxyType({}))
    idp_classifications: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Copy at construction so later mutation of caller collections is invisible
        object.__setattr__(self, "rag_chunks", tuple(self.rag_chunks))
        object.__setattr__(self, "kg_entities", tuple(self.kg_entities))
        object.__setattr__(self, "kg_relations", tuple(self.kg_relations))
        object.__setattr__(self, "idp_metadata", MappingProxyType(dict(self.idp_metadata)))
        object.__setattr__(self, "idp_classifications", tuple(self.idp_classifications))

    @property
    def is_empty(self) -> bool:
        """True when no source holds any searchable record."""
        return not (
            self.rag_chunks
            or self.kg_entities
            or self.kg_relations
            or self.idp_metadata
            or self.idp_classifications
        )

    def entity_index(self) -> dict[str, KgEntity]:
        """Map entity id to entity (first occurrence wins)."""
        index: dict[str, KgEntity] = {}
        for entity in self.kg_entities:
            index.setdefault(entity.id, entity)
        return index

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchableSnapshot:
        """
        Build a snapshot from the collaborators' plain JSON shape.

        Accepted keys (camelCase or snake_case):
            ragChunks / rag_chunks / chunks
            kgEntities / kg_entities / entities
            kgRelations / kg_relations / relations
            idpMetadata / idp_metadata / metadata
            idpClassifications / idp_classifications / classification

        Raises:
            SnapshotDataError: If a record is missing a required field or
                holds a value of the wrong shape
        """
        chunks = _first_present(data, "ragChunks", "rag_chunks", "chunks")
        entities = _first_present(data, "kgEntities", "kg_entities", "entities")
        relations = _first_present(data, "kgRelations", "kg_relations", "relations")
        metadata = _first_present(data, "idpMetadata", "idp_metadata", "metadata")
        classifications = _first_present(data, "idpClassifications", "idp_classifications", "classification")

        if metadata is not None and not isinstance(metadata, Mapping):
            msg = f"expected a mapping, got {type(metadata).__name__}"
            raise SnapshotDataError(msg, source="idp")

        return cls(
            rag_chunks=tuple(_parse_chunk(c) for c in _iter_records(chunks, "rag")),
            kg_entities=tuple(_parse_entity(e) for e in _iter_records(entities, "kg")),
            kg_relations=tuple(_parse_relation(r) for r in _iter_records(relations, "kg")),
            idp_metadata=dict(metadata or {}),
            idp_classifications=_parse_labels(classifications, "classification", "idp"),
        )


# =============================================================================
# Parsing helpers
# =============================================================================


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _iter_records(records: Iterable[Any] | None, source: str) -> Iterable[Mapping[str, Any]]:
    for record in records or ():
        if not isinstance(record, Mapping):
            msg = f"expected an object, got {type(record).__name__}"
            raise SnapshotDataError(msg, source=source)
        yield record


def _require(record: Mapping[str, Any], key: str, source: str) -> Any:
    try:
        return record[key]
    except KeyError:
        msg = f"record is missing required field '{key}'"
        raise SnapshotDataError(msg, source=source) from None


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        msg = f"invalid timestamp {value!r}"
        raise SnapshotDataError(msg, source="rag") from exc


N = TypeVar("N", int, float)


def _parse_number(value: Any, kind: type[N], key: str, source: str) -> N:
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        msg = f"invalid {key} {value!r}, expected {kind.__name__}"
        raise SnapshotDataError(msg, source=source) from exc


def _parse_labels(value: Any, key: str, source: str) -> tuple[str, ...]:
    """A lone string is one label, not a sequence of characters."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Mapping) or not isinstance(value, Iterable):
        msg = f"expected a list for '{key}', got {type(value).__name__}"
        raise SnapshotDataError(msg, source=source)
    return tuple(str(v) for v in value)


def _parse_chunk(record: Mapping[str, Any]) -> RagChunk:
    return RagChunk(
        id=str(_require(record, "id", "rag")),
        title=str(record.get("title", "")),
        content=str(_require(record, "content", "rag")),
        chunk_index=_parse_number(record.get("chunkIndex", record.get("chunk_index", 0)), int, "chunkIndex", "rag"),
        token_count=_parse_number(record.get("tokenCount", record.get("token_count", 0)), int, "tokenCount", "rag"),
        tags=tuple(dict.fromkeys(_parse_labels(record.get("tags"), "tags", "rag"))),
        timestamp=_parse_timestamp(record.get("timestamp")),
    )


def _parse_entity(record: Mapping[str, Any]) -> KgEntity:
    return KgEntity(
        id=str(_require(record, "id", "kg")),
        name=str(_require(record, "name", "kg")),
        type=str(_require(record, "type", "kg")),
        confidence=_parse_number(record.get("confidence", 1.0), float, "confidence", "kg"),
    )


def _parse_relation(record: Mapping[str, Any]) -> KgRelation:
    source = record.get("sourceEntityId", record.get("source_entity_id", record.get("source")))
    target = record.get("targetEntityId", record.get("target_entity_id", record.get("target")))
    if source is None or target is None:
        msg = "relation is missing its source or target entity id"
        raise SnapshotDataError(msg, source="kg")
    return KgRelation(
        source_entity_id=str(source),
        target_entity_id=str(target),
        type=str(_require(record, "type", "kg")),
        confidence=_parse_number(record.get("confidence", 1.0), float, "confidence", "kg"),
    )
