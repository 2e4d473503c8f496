"""
Core module for the Unified Search engine.

Provides:
- Unified exception hierarchy
- Async utilities for concurrent matcher execution

Python 3.12+ features:
- Type parameter syntax (PEP 695)
- ExceptionGroup support (PEP 654)
- asyncio.TaskGroup
"""

from .async_utils import (
    gather_with_errors,
    run_in_thread,
    timeout_with_fallback,
)
from .exceptions import (
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidParameterError,
    InvalidQueryError,
    SnapshotDataError,
    SnapshotMissingError,
    SourceMatchError,
    UnifiedSearchError,
    ValidationError,
    create_error_group,
)

__all__ = [
    # Exceptions
    "UnifiedSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "ValidationError",
    "InvalidQueryError",
    "InvalidParameterError",
    "DataError",
    "SnapshotDataError",
    "SourceMatchError",
    "SnapshotMissingError",
    "ConfigurationError",
    "create_error_group",
    # Async utilities
    "gather_with_errors",
    "timeout_with_fallback",
    "run_in_thread",
]
