"""
Runtime settings for the Unified Search engine.

Settings come from keyword arguments or ``UNIFIED_SEARCH_*`` environment
variables and are handed to the DI container as a plain dict:

    settings = SearchSettings.from_env()
    container = ApplicationContainer()
    container.config.from_dict(settings.to_dict())

Environment variables:
    UNIFIED_SEARCH_DEFAULT_LIMIT        page size (default 20)
    UNIFIED_SEARCH_EXCERPT_RADIUS       characters around a match (default 50)
    UNIFIED_SEARCH_MAX_EXCERPT_LENGTH   excerpt cap (default 120)
    UNIFIED_SEARCH_MATCHER_TIMEOUT      seconds per matcher in async mode (default 5.0, 0 disables)
    UNIFIED_SEARCH_HISTORY_SIZE         remembered queries per session (default 20)
    UNIFIED_SEARCH_INTENT_CACHE_SIZE    memoised intents per session (default 128)
    UNIFIED_SEARCH_SUGGESTION_LIMIT     autocomplete entries (default 10)
    UNIFIED_SEARCH_DEBOUNCE_SECONDS     debounce delay (default 0.3)
    UNIFIED_SEARCH_LOG_LEVEL            logging level (default INFO)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

from unified_search.core.exceptions import ConfigurationError, ErrorContext

ENV_PREFIX = "UNIFIED_SEARCH_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class SearchSettings:
    """Engine and session settings."""

    default_limit: int = 20
    excerpt_radius: int = 50
    max_excerpt_length: int = 120
    matcher_timeout: float = 5.0
    history_size: int = 20
    intent_cache_size: int = 128
    suggestion_limit: int = 10
    debounce_seconds: float = 0.3
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("default_limit", "excerpt_radius", "history_size", "suggestion_limit"):
            if getattr(self, name) < 0:
                msg = f"{name} must be >= 0, got {getattr(self, name)}"
                raise ConfigurationError(msg, context=ErrorContext(operation="settings", input_value=name))
        if self.max_excerpt_length <= 0:
            msg = f"max_excerpt_length must be > 0, got {self.max_excerpt_length}"
            raise ConfigurationError(msg)
        if self.intent_cache_size <= 0:
            msg = f"intent_cache_size must be > 0, got {self.intent_cache_size}"
            raise ConfigurationError(msg)
        if self.matcher_timeout < 0 or self.debounce_seconds < 0:
            msg = "matcher_timeout and debounce_seconds must be >= 0"
            raise ConfigurationError(msg)
        if logging.getLevelName(self.log_level.upper()) not in range(0, 60):
            msg = f"Unknown log level: {self.log_level!r}"
            raise ConfigurationError(msg)

    @property
    def timeout_or_none(self) -> float | None:
        """Matcher timeout, with 0 meaning no timeout."""
        return self.matcher_timeout or None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SearchSettings:
        """
        Build settings from ``UNIFIED_SEARCH_*`` environment variables.

        Raises:
            ConfigurationError: If a variable cannot be parsed
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}", "").strip()
            if not raw:
                continue
            default = getattr(cls, f.name)
            try:
                values[f.name] = type(default)(raw)
            except ValueError as exc:
                msg = f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}"
                raise ConfigurationError(msg, context=ErrorContext(operation="settings", input_value=raw)) from exc
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (DI container configuration)."""
        return asdict(self)


def configure_logging(level: str = "INFO") -> None:
    """Route package logs to stderr in the standard format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
