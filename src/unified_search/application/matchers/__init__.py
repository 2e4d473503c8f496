"""
Source matchers.

Three independent implementations sharing the SourceMatcher contract:
- RagMatcher: document chunks
- KnowledgeGraphMatcher: entities and relations
- DocumentMetadataMatcher: extracted metadata and classifications
"""

from __future__ import annotations

from .base import SourceMatcher, contains, normalize_score
from .document_metadata import DocumentMetadataMatcher
from .knowledge_graph import KnowledgeGraphMatcher
from .rag import RagMatcher

__all__ = [
    "SourceMatcher",
    "RagMatcher",
    "KnowledgeGraphMatcher",
    "DocumentMetadataMatcher",
    "contains",
    "normalize_score",
]
