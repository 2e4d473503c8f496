"""
Document-metadata (IDP) matcher.

Searches the fields extracted by the document-processing collaborator:

1. Metadata entries: +1 per keyword found in the key or the stringified value.
2. Classification labels: +1 per keyword found in the label.
"""

from __future__ import annotations

from collections.abc import Sequence

from unified_search.application.matchers.base import (
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
    Classification,
    MetadataEntry,
    SearchableSnapshot,
)

METADATA_WEIGHT = 1.0
CLASSIFICATION_WEIGHT = 1.0

METADATA_ORIGIN = "Document Metadata"
CLASSIFICATION_ORIGIN = "Document Processing"
CLASSIFICATION_TITLE = "Document Classification"


class DocumentMetadataMatcher(SourceMatcher):
    """Keyword matcher over extracted metadata and classifications."""

    source_type = SourceType.IDP

    def match(
        self,
        keywords: Sequence[str],
        intent: QueryIntent,
        snapshot: SearchableSnapshot,
    ) -> list[UnifiedResult]:
        results: list[UnifiedResult] = []

        for key, value in snapshot.idp_metadata.items():
            result = self._match_entry(MetadataEntry(key=key, value=value), keywords)
            if result is not None:
                results.append(result)

        for index, label in enumerate(snapshot.idp_classifications):
            result = self._match_classification(Classification(label=label, index=index), keywords)
            if result is not None:
                results.append(result)

        return results

    def _match_entry(self, entry: MetadataEntry, keywords: Sequence[str]) -> UnifiedResult | None:
        value_text = str(entry.value)
        hits = [k for k in keywords if contains(entry.key, k) or contains(value_text, k)]
        score = normalize_score(METADATA_WEIGHT * len(hits), len(keywords))
        if score <= 0:
            return None

        excerpt = self.highlighter.build_excerpt(f"{entry.key}: {value_text}", hits, "metadata")
        return UnifiedResult(
            id=f"idp-metadata-{entry.key}",
            source_type=SourceType.IDP,
            score=score,
            metadata=ResultMetadata(
                title=entry.key,
                description=value_text,
                origin=METADATA_ORIGIN,
            ),
            payload=entry,
            matched_fields=("metadata",),
            excerpts=(excerpt,) if excerpt is not None else (),
        )

    def _match_classification(
        self,
        classification: Classification,
        keywords: Sequence[str],
    ) -> UnifiedResult | None:
        hits = [k for k in keywords if contains(classification.label, k)]
        score = normalize_score(CLASSIFICATION_WEIGHT * len(hits), len(keywords))
        if score <= 0:
            return None

        excerpt = self.highlighter.build_excerpt(classification.label, hits, "classification")
        return UnifiedResult(
            id=f"idp-classification-{classification.index}",
            source_type=SourceType.IDP,
            score=score,
            metadata=ResultMetadata(
                title=CLASSIFICATION_TITLE,
                description=classification.label,
                origin=CLASSIFICATION_ORIGIN,
            ),
            payload=classification,
            matched_fields=("classification",),
            excerpts=(excerpt,) if excerpt is not None else (),
        )
