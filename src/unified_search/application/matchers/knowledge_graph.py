"""
Knowledge-graph matcher.

Two passes over the snapshot:

1. Entities: +2 per keyword in the name, +1 per keyword in the type.
   Entities whose type is outside the intent's entity-type filter are
   suppressed.
2. Relations: both endpoints must resolve to entities; the synthetic sentence
   "<source> <TYPE> <target>" scores +1.5 per keyword.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from unified_search.application.matchers.base import (
    FieldMatches,
    SourceMatcher,
    contains,
    normalize_score,
)
from unified_search.domain.entities.query import QueryIntent
from unified_search.domain.entities.result import (
    ResultMetadata,
    SourceType,
    UnifiedResult,
)
from unified_search.domain.entities.snapshot import (
    KgEntity,
    KgRelation,
    SearchableSnapshot,
)

logger = logging.getLogger(__name__)

NAME_WEIGHT = 2.0
TYPE_WEIGHT = 1.0
RELATION_WEIGHT = 1.5

ORIGIN_LABEL = "Knowledge Graph"


class KnowledgeGraphMatcher(SourceMatcher):
    """Keyword matcher over knowledge-graph entities and relations."""

    source_type = SourceType.KG

    def match(
        self,
        keywords: Sequence[str],
        intent: QueryIntent,
        snapshot: SearchableSnapshot,
    ) -> list[UnifiedResult]:
        entity_types = intent.extracted_filters.entity_types
        results: list[UnifiedResult] = []

        for entity in snapshot.kg_entities:
            result = self._match_entity(entity, keywords, entity_types)
            if result is not None:
                results.append(result)

        entities = snapshot.entity_index()
        skipped = 0
        for index, relation in enumerate(snapshot.kg_relations):
            source = entities.get(relation.source_entity_id)
            target = entities.get(relation.target_entity_id)
            if source is None or target is None:
                skipped += 1
                continue
            result = self._match_relation(index, relation, source, target, keywords)
            if result is not None:
                results.append(result)

        if skipped:
            logger.debug("Skipped %d relation(s) with unresolved endpoints", skipped)
        return results

    def _match_entity(
        self,
        entity: KgEntity,
        keywords: Sequence[str],
        entity_types: frozenset[str],
    ) -> UnifiedResult | None:
        if entity_types and entity.type.upper() not in entity_types:
            return None

        total = 0.0
        fields = FieldMatches()
        name_hits: list[str] = []
        for keyword in keywords:
            if contains(entity.name, keyword):
                total += NAME_WEIGHT
                fields.add("name")
                name_hits.append(keyword)
            if contains(entity.type, keyword):
                total += TYPE_WEIGHT
                fields.add("type")

        score = normalize_score(total, len(keywords))
        if score <= 0:
            return None

        excerpt = self.highlighter.build_excerpt(entity.name, name_hits, "name")
        return UnifiedResult(
            id=f"kg-entity-{entity.id}",
            source_type=SourceType.KG,
            score=score,
            metadata=ResultMetadata(
                title=entity.name,
                description=f"{entity.type} entity",
                origin=ORIGIN_LABEL,
                confidence=entity.confidence,
            ),
            payload=entity,
            matched_fields=fields.as_tuple(),
            excerpts=(excerpt,) if excerpt is not None else (),
        )

    def _match_relation(
        self,
        index: int,
        relation: KgRelation,
        source: KgEntity,
        target: KgEntity,
        keywords: Sequence[str],
    ) -> UnifiedResult | None:
        sentence = f"{source.name} {relation.type} {target.name}"
        hits = [k for k in keywords if contains(sentence, k)]
        score = normalize_score(RELATION_WEIGHT * len(hits), len(keywords))
        if score <= 0:
            return None

        excerpt = self.highlighter.build_excerpt(sentence, hits, "relationship")
        return UnifiedResult(
            id=f"kg-relation-{index}",
            source_type=SourceType.KG,
            score=score,
            metadata=ResultMetadata(
                title=f"{source.name} → {target.name}",
                description=f"Relationship: {relation.type}",
                origin=ORIGIN_LABEL,
                confidence=relation.confidence,
            ),
            payload=relation,
            matched_fields=("relationship",),
            excerpts=(excerpt,) if excerpt is not None else (),
        )
