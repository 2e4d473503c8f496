"""
Search Session - caller-held search state.

Holds what a search UI needs between keystrokes: the current query, filters,
options, last response, error state, query history and the highlighted
result. Filters and options are immutable values; every setter swaps in a new
one.

Intents are memoised per (query, enabled types) in an LRU cache, so changing
sort order, paging or non-type filters reruns the pipeline without
re-analysing the query.

Async searches supersede each other: each call takes a new generation number
and a call that is no longer the latest returns None without touching state.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any

from cachetools import LRUCache

from unified_search.application.search.engine import UnifiedSearchEngine
from unified_search.application.search.suggestions import DEFAULT_SUGGESTION_LIMIT, Suggestion, suggest
from unified_search.core.exceptions import UnifiedSearchError
from unified_search.domain.entities.query import QueryIntent, SearchFilters, SearchOptions
from unified_search.domain.entities.response import SearchResponse
from unified_search.domain.entities.result import SourceType, UnifiedResult
from unified_search.domain.entities.snapshot import SearchableSnapshot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 20
DEFAULT_INTENT_CACHE_SIZE = 128
DEFAULT_DEBOUNCE_SECONDS = 0.3


class SearchSession:
    """
    Stateful wrapper around UnifiedSearchEngine for one user.

    Usage:
        session = SearchSession(engine, snapshot)
        session.toggle_type("idp")
        response = session.search("revenue", sort_by="date")

        if session.error:
            show_failure(session.error)
        elif response and response.is_empty:
            show_no_results()
    """

    def __init__(
        self,
        engine: UnifiedSearchEngine,
        snapshot: SearchableSnapshot | None = None,
        *,
        filters: SearchFilters | None = None,
        options: SearchOptions | None = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
        intent_cache_size: int = DEFAULT_INTENT_CACHE_SIZE,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._engine = engine
        self.snapshot = snapshot
        self.query = ""
        self.filters = filters or SearchFilters()
        self.options = options or SearchOptions()
        self.response: SearchResponse | None = None
        self.error: UnifiedSearchError | None = None
        self.is_searching = False
        self.history: deque[str] = deque(maxlen=history_size)
        self.highlighted_id: str | None = None

        self._intents: LRUCache[tuple[str, frozenset[SourceType]], QueryIntent] = LRUCache(
            maxsize=intent_cache_size
        )
        self._suggestion_limit = suggestion_limit
        self._debounce_seconds = debounce_seconds
        self._generation = 0

    # =========================================================================
    # State setters
    # =========================================================================

    def set_query(self, query: str) -> None:
        self.query = query

    def set_filters(self, filters: SearchFilters) -> None:
        self.filters = filters

    def set_options(self, options: SearchOptions) -> None:
        self.options = options

    def toggle_type(self, source: SourceType | str) -> SearchFilters:
        """
        Enable or disable a source type.

        Raises:
            InvalidParameterError: If this would disable the last enabled type
        """
        self.filters = self.filters.toggle_type(source)
        return self.filters

    def add_tag(self, tag: str) -> SearchFilters:
        self.filters = self.filters.with_tag(tag)
        return self.filters

    def remove_tag(self, tag: str) -> SearchFilters:
        self.filters = self.filters.without_tag(tag)
        return self.filters

    @property
    def results(self) -> tuple[UnifiedResult, ...]:
        return self.response.results if self.response else ()

    # =========================================================================
    # Searching
    # =========================================================================

    def search(self, query: str | None = None, **option_overrides: Any) -> SearchResponse | None:
        """
        Run a search with the session's filters and options.

        Args:
            query: New query text (None reuses the current query)
            **option_overrides: SearchOptions fields to change for this and
                later searches (e.g. sort_by="date", offset=20)

        Returns:
            The response, or None when the query is empty or the search failed
            (see ``error``)
        """
        self._generation += 1
        prepared = self._prepare(query, option_overrides)
        if prepared is None:
            return None

        self.is_searching = True
        try:
            intent = self._intent_for(self.query)
            response = self._engine.search_with_intent(intent, self.snapshot, self.filters, self.options)
        except UnifiedSearchError as exc:
            self._fail(exc)
            return None
        except ExceptionGroup as eg:
            self._fail_group(eg)
            return None
        finally:
            self.is_searching = False

        self._succeed(response)
        return response

    async def search_async(self, query: str | None = None, **option_overrides: Any) -> SearchResponse | None:
        """
        Search with concurrent matchers; superseded calls return None.

        A call is superseded when another search starts before it finishes.
        Its outcome, success or failure, is discarded.
        """
        self._generation += 1
        generation = self._generation
        prepared = self._prepare(query, option_overrides)
        if prepared is None:
            return None

        self.is_searching = True
        try:
            intent = self._intent_for(self.query)
            response = await self._engine.search_async(
                self.query, self.snapshot, self.filters, self.options, intent=intent
            )
        except UnifiedSearchError as exc:
            if generation == self._generation:
                self._fail(exc)
            return None
        except ExceptionGroup as eg:
            if generation == self._generation:
                self._fail_group(eg)
            return None
        finally:
            # A newer search owns the flag once it has started
            if generation == self._generation:
                self.is_searching = False

        if generation != self._generation:
            logger.debug("Discarding superseded search %r (generation %d)", query, generation)
            return None

        self._succeed(response)
        return response

    async def search_debounced(
        self,
        query: str,
        delay: float | None = None,
        **option_overrides: Any,
    ) -> SearchResponse | None:
        """
        Wait ``delay`` seconds, then search unless a newer call arrived.

        Typical use is one call per keystroke; only the last one in a burst
        runs the pipeline.
        """
        self._generation += 1
        generation = self._generation
        self.query = query
        await asyncio.sleep(self._debounce_seconds if delay is None else delay)
        if generation != self._generation:
            return None
        return await self.search_async(query, **option_overrides)

    def clear(self) -> None:
        """Drop the query, results and error state."""
        self._generation += 1
        self.query = ""
        self.response = None
        self.error = None
        self.is_searching = False
        self.highlighted_id = None

    # =========================================================================
    # Highlighting
    # =========================================================================

    def highlight_result(self, result_id: str) -> None:
        self.highlighted_id = result_id

    def clear_highlights(self) -> None:
        self.highlighted_id = None

    def is_highlighted(self, result_id: str) -> bool:
        return self.highlighted_id is not None and self.highlighted_id == result_id

    # =========================================================================
    # Suggestions
    # =========================================================================

    def suggest(self, text: str, limit: int | None = None) -> list[Suggestion]:
        """Autocomplete from the snapshot and this session's history."""
        if self.snapshot is None:
            return []
        return suggest(
            text,
            self.snapshot,
            types=self.filters.types,
            history=self.history,
            limit=self._suggestion_limit if limit is None else limit,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _prepare(self, query: str | None, option_overrides: dict[str, Any]) -> str | None:
        if query is not None:
            self.query = query
        if option_overrides:
            self.options = self.options.merged(**option_overrides)
        if not self.query.strip():
            self.response = None
            self.error = None
            self.is_searching = False
            return None
        return self.query

    def _intent_for(self, query: str) -> QueryIntent:
        key = (query, self.filters.types)
        intent = self._intents.get(key)
        if intent is None:
            intent = self._engine.analyze(query, self.filters)
            self._intents[key] = intent
        return intent

    def _succeed(self, response: SearchResponse) -> None:
        self.response = response
        self.error = None
        self._remember(self.query)

    def _fail(self, exc: UnifiedSearchError) -> None:
        logger.warning("Search %r failed: %s", self.query, exc)
        self.response = None
        self.error = exc

    def _fail_group(self, eg: ExceptionGroup[Exception]) -> None:
        failures = [e for e in eg.exceptions if isinstance(e, UnifiedSearchError)]
        self._fail(failures[0] if failures else UnifiedSearchError(str(eg)))

    def _remember(self, query: str) -> None:
        query = query.strip()
        if query in self.history:
            self.history.remove(query)
        self.history.appendleft(query)
