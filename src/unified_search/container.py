"""
Application DI Container (dependency-injector).

Wires the stateless search services once and hands out fresh sessions.

Usage::

    from unified_search.config import SearchSettings
    from unified_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(SearchSettings.from_env().to_dict())
    container.init_resources()  # applies config.log_level

    engine = container.engine()
    session = container.session(snapshot=snapshot)

    # In tests - override any provider:
    container.rag_matcher.override(providers.Object(failing_matcher))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from unified_search.application.matchers import (
    DocumentMetadataMatcher,
    KnowledgeGraphMatcher,
    RagMatcher,
)
from unified_search.application.search.engine import UnifiedSearchEngine
from unified_search.application.search.highlighter import Highlighter
from unified_search.application.search.query_analyzer import QueryAnalyzer
from unified_search.application.search.result_aggregator import ResultRanker
from unified_search.application.session.manager import SearchSession
from unified_search.config import SearchSettings, configure_logging
from unified_search.domain.entities.query import SearchOptions

logger = logging.getLogger(__name__)

_DEFAULTS = SearchSettings()


def _or_default(value: object, name: str) -> object:
    return getattr(_DEFAULTS, name) if value is None else value


def _configure_logging(level: str | None) -> None:
    configure_logging(_or_default(level, "log_level"))  # type: ignore[arg-type]


def _create_highlighter(radius: int | None, max_length: int | None) -> Highlighter:
    return Highlighter(
        radius=_or_default(radius, "excerpt_radius"),  # type: ignore[arg-type]
        max_length=_or_default(max_length, "max_excerpt_length"),  # type: ignore[arg-type]
    )


def _create_engine(
    analyzer: QueryAnalyzer,
    matchers: list,
    ranker: ResultRanker,
    matcher_timeout: float | None,
) -> UnifiedSearchEngine:
    timeout = _or_default(matcher_timeout, "matcher_timeout")
    logger.debug("Creating search engine (matcher timeout %ss)", timeout or "none")
    return UnifiedSearchEngine(
        analyzer=analyzer,
        matchers=matchers,
        ranker=ranker,
        matcher_timeout=timeout or None,  # type: ignore[arg-type]
    )


def _create_session(
    engine: UnifiedSearchEngine,
    snapshot: object = None,
    history_size: int | None = None,
    intent_cache_size: int | None = None,
    suggestion_limit: int | None = None,
    debounce_seconds: float | None = None,
    default_limit: int | None = None,
) -> SearchSession:
    return SearchSession(
        engine,
        snapshot,  # type: ignore[arg-type]
        options=SearchOptions(limit=_or_default(default_limit, "default_limit")),  # type: ignore[arg-type]
        history_size=_or_default(history_size, "history_size"),  # type: ignore[arg-type]
        intent_cache_size=_or_default(intent_cache_size, "intent_cache_size"),  # type: ignore[arg-type]
        suggestion_limit=_or_default(suggestion_limit, "suggestion_limit"),  # type: ignore[arg-type]
        debounce_seconds=_or_default(debounce_seconds, "debounce_seconds"),  # type: ignore[arg-type]
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the Unified Search engine.

    Manages creation and lifecycle of the search services:
    - ``log_setup``: package logging at ``config.log_level`` (via ``init_resources()``)
    - ``analyzer``, ``highlighter``, ``ranker``: stateless pipeline stages
    - ``rag_matcher``, ``kg_matcher``, ``idp_matcher``: per-source scoring
    - ``engine``: the orchestrator (singleton)
    - ``session``: caller-held state (new object per call)

    Unset configuration keys fall back to ``SearchSettings`` defaults.
    """

    config = providers.Configuration()

    log_setup = providers.Resource(_configure_logging, level=config.log_level)

    highlighter = providers.Singleton(
        _create_highlighter,
        radius=config.excerpt_radius,
        max_length=config.max_excerpt_length,
    )

    analyzer = providers.Singleton(QueryAnalyzer)

    rag_matcher = providers.Singleton(RagMatcher, highlighter=highlighter)
    kg_matcher = providers.Singleton(KnowledgeGraphMatcher, highlighter=highlighter)
    idp_matcher = providers.Singleton(DocumentMetadataMatcher, highlighter=highlighter)

    ranker = providers.Singleton(ResultRanker)

    engine = providers.Singleton(
        _create_engine,
        analyzer=analyzer,
        matchers=providers.List(rag_matcher, kg_matcher, idp_matcher),
        ranker=ranker,
        matcher_timeout=config.matcher_timeout,
    )

    session = providers.Factory(
        _create_session,
        engine=engine,
        history_size=config.history_size,
        intent_cache_size=config.intent_cache_size,
        suggestion_limit=config.suggestion_limit,
        debounce_seconds=config.debounce_seconds,
        default_limit=config.default_limit,
    )


__all__ = ["ApplicationContainer"]
