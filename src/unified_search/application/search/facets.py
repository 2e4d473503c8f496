"""
Facet Computer - aggregate counts for filter widgets.

Facets are computed over the ranked and filtered result set before
pagination, so they describe everything the current query and filters can
reach, not only the visible page.

Type filtering runs before faceting: a disabled source type always reports 0.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from unified_search.domain.entities.response import SearchFacets
from unified_search.domain.entities.result import SOURCE_ORDER, SourceType, UnifiedResult


def compute_facets(results: Iterable[UnifiedResult]) -> SearchFacets:
    """
    Count results by source type, tag and knowledge-graph payload type.

    Args:
        results: Ranked and filtered results (pre-pagination)

    Returns:
        SearchFacets with every source type present (zero when absent)
    """
    types: Counter[str] = Counter({source.value: 0 for source in SOURCE_ORDER})
    tags: Counter[str] = Counter()
    entity_types: Counter[str] = Counter()

    for result in results:
        types[result.source_type.value] += 1
        tags.update(result.metadata.tags)
        if result.source_type is SourceType.KG:
            payload_type = result.payload_type
            if payload_type:
                entity_types[payload_type] += 1

    return SearchFacets(
        types=dict(types),
        tags=dict(tags),
        entity_types=dict(entity_types),
    )
