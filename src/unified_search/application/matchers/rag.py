"""
RAG chunk matcher.

Scores each chunk by keyword hits:
    content  +1.0
    title    +2.0
    each tag +1.5

and builds one content excerpt per keyword that hits the content.
"""

from __future__ import annotations

from collections.abc import Sequence

from unified_search.application.matchers.base import (
    FieldMatches,
    SourceMatcher,
    contains,
    normalize_score,
)
from unified_search.domain.entities.query import QueryIntent
from unified_search.domain.entities.result import (
    Excerpt,
    ResultMetadata,
    SourceType,
    UnifiedResult,
)
from unified_search.domain.entities.snapshot import RagChunk, SearchableSnapshot

CONTENT_WEIGHT = 1.0
TITLE_WEIGHT = 2.0
TAG_WEIGHT = 1.5

ORIGIN_LABEL = "Document Chunks"


class RagMatcher(SourceMatcher):
    """Keyword matcher over RAG chunks."""

    source_type = SourceType.RAG

    def match(
        self,
        keywords: Sequence[str],
        intent: QueryIntent,
        snapshot: SearchableSnapshot,
    ) -> list[UnifiedResult]:
        results: list[UnifiedResult] = []
        for chunk in snapshot.rag_chunks:
            result = self._match_chunk(chunk, keywords)
            if result is not None:
                results.append(result)
        return results

    def _match_chunk(self, chunk: RagChunk, keywords: Sequence[str]) -> UnifiedResult | None:
        total = 0.0
        fields = FieldMatches()
        excerpts: list[Excerpt] = []

        for keyword in keywords:
            if contains(chunk.content, keyword):
                total += CONTENT_WEIGHT
                fields.add("content")
                excerpt = self.highlighter.build_excerpt(chunk.content, [keyword], "content")
                if excerpt is not None:
                    excerpts.append(excerpt)

            if contains(chunk.title, keyword):
                total += TITLE_WEIGHT
                fields.add("title")

            for tag in chunk.tags:
                if contains(tag, keyword):
                    total += TAG_WEIGHT
                    fields.add("tags")

        score = normalize_score(total, len(keywords))
        if score <= 0:
            return None

        return UnifiedResult(
            id=f"rag-chunk-{chunk.id}",
            source_type=SourceType.RAG,
            score=score,
            metadata=ResultMetadata(
                title=chunk.title,
                description=f"Chunk {chunk.chunk_index} - {chunk.token_count} tokens",
                origin=ORIGIN_LABEL,
                timestamp=chunk.timestamp,
                tags=tuple(chunk.tags),
            ),
            payload=chunk,
            matched_fields=fields.as_tuple(),
            excerpts=tuple(excerpts),
        )
