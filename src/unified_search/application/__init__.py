"""
Application Layer - Search Orchestration

Contains:
- search: query analysis, ranking, filtering, faceting, pagination, engine
- matchers: per-source scoring (RAG chunks, knowledge graph, document metadata)
- session: caller-held search state
"""

from .matchers import (
    DocumentMetadataMatcher,
    KnowledgeGraphMatcher,
    RagMatcher,
    SourceMatcher,
)
from .search.engine import UnifiedSearchEngine
from .search.highlighter import Highlighter
from .search.query_analyzer import QueryAnalyzer
from .search.result_aggregator import ResultRanker
from .session.manager import SearchSession

__all__ = [
    # Search
    "QueryAnalyzer",
    "Highlighter",
    "ResultRanker",
    "UnifiedSearchEngine",
    # Matchers
    "SourceMatcher",
    "RagMatcher",
    "KnowledgeGraphMatcher",
    "DocumentMetadataMatcher",
    # Session
    "SearchSession",
]
