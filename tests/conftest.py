"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from unified_search.application.search.engine import UnifiedSearchEngine
from unified_search.application.search.query_analyzer import QueryAnalyzer
from unified_search.domain.entities.result import ResultMetadata, SourceType, UnifiedResult
from unified_search.domain.entities.snapshot import (
    KgEntity,
    KgRelation,
    MetadataEntry,
    RagChunk,
    SearchableSnapshot,
)

# ============================================================
# Snapshot Fixtures
# ============================================================


@pytest.fixture
def sample_chunks():
    """Three document chunks; the last one is undated."""
    return (
        RagChunk(
            id="c1",
            title="Revenue Summary",
            content="Revenue grew 12% in the third quarter, driven by Acme Corp contracts.",
            chunk_index=0,
            token_count=14,
            tags=("finance", "quarterly"),
            timestamp=datetime(2024, 3, 1),
        ),
        RagChunk(
            id="c2",
            title="Risk Factors",
            content="Supply chain risk increased after the merger with Globex.",
            chunk_index=1,
            token_count=10,
            tags=("risk",),
            timestamp=datetime(2023, 6, 15),
        ),
        RagChunk(
            id="c3",
            title="Appendix",
            content="Glossary of revenue terms.",
            chunk_index=2,
            token_count=4,
        ),
    )


@pytest.fixture
def sample_snapshot(sample_chunks):
    """A snapshot touching every source, with one dangling relation."""
    return SearchableSnapshot(
        rag_chunks=sample_chunks,
        kg_entities=(
            KgEntity(id="1", name="Acme Corp", type="ORG", confidence=0.9),
            KgEntity(id="2", name="Globex", type="ORG", confidence=0.8),
            KgEntity(id="3", name="Jane Doe", type="PERSON", confidence=0.95),
        ),
        kg_relations=(
            KgRelation(source_entity_id="1", target_entity_id="2", type="ACQUIRED", confidence=0.7),
            KgRelation(source_entity_id="3", target_entity_id="1", type="WORKS_FOR", confidence=0.85),
            KgRelation(source_entity_id="1", target_entity_id="99", type="OWNS"),
        ),
        idp_metadata={"author": "Jane Doe", "fiscal_year": 2024, "department": "Finance"},
        idp_classifications=("Financial Report", "Quarterly Filing"),
    )


@pytest.fixture
def empty_snapshot():
    return SearchableSnapshot()


# ============================================================
# Service Fixtures
# ============================================================


@pytest.fixture
def analyzer():
    return QueryAnalyzer()


@pytest.fixture
def intent_for(analyzer):
    """Analyze a query with every source enabled."""

    def _analyze(query: str):
        return analyzer.analyze(query)

    return _analyze


@pytest.fixture
def engine():
    return UnifiedSearchEngine()


# ============================================================
# Result Factories
# ============================================================


_DEFAULT_PAYLOADS = {
    SourceType.RAG: lambda rid: RagChunk(id=rid, title=rid, content=rid),
    SourceType.KG: lambda rid: KgEntity(id=rid, name=rid, type="ORG"),
    SourceType.IDP: lambda rid: MetadataEntry(key=rid, value=rid),
}


@pytest.fixture
def make_result():
    """Create a UnifiedResult with only the fields a test cares about."""

    def _create(
        result_id: str = "r1",
        source_type: SourceType = SourceType.RAG,
        score: float = 1.0,
        confidence: float | None = None,
        timestamp: datetime | None = None,
        tags: tuple[str, ...] = (),
        payload=None,
    ) -> UnifiedResult:
        return UnifiedResult(
            id=result_id,
            source_type=source_type,
            score=score,
            metadata=ResultMetadata(
                title=result_id,
                description="",
                origin="test",
                timestamp=timestamp,
                confidence=confidence,
                tags=tags,
            ),
            payload=payload if payload is not None else _DEFAULT_PAYLOADS[source_type](result_id),
        )

    return _create
