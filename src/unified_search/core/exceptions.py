"""
Unified Exception Hierarchy for the Unified Search engine.

Python 3.12+ features used:
- ExceptionGroup for multi-source error reporting
- Modern type annotations

Exception Hierarchy:
    UnifiedSearchError (base)
    ├── ValidationError
    │   ├── InvalidQueryError
    │   └── InvalidParameterError
    ├── DataError
    │   ├── SnapshotDataError
    │   └── SourceMatchError
    ├── SnapshotMissingError
    └── ConfigurationError

"No results" is never an error: an empty page is a valid response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, search continues
    ERROR = auto()        # The operation failed
    CRITICAL = auto()     # Cannot start the operation at all


class ErrorCategory(Enum):
    """Categories for error classification."""
    VALIDATION = "validation"
    DATA = "data"
    CONFIGURATION = "config"
    SEARCH = "search"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """
    Rich context for error messages.

    Uses Python 3.10+ slots for memory efficiency.
    """
    operation: str | None = None
    source: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    related_errors: tuple[Exception, ...] = field(default_factory=tuple)
    metadata: dict[str, Any] = field(default_factory=dict)

    def evolve(self, **changes: Any) -> ErrorContext:
        """Return a copy with the given fields replaced."""
        values = {
            "operation": self.operation,
            "source": self.source,
            "input_value": self.input_value,
            "suggestion": self.suggestion,
            "related_errors": self.related_errors,
            "metadata": self.metadata,
        }
        values.update(changes)
        return ErrorContext(**values)


class UnifiedSearchError(Exception):
    """
    Base exception for all Unified Search errors.

    Provides:
    - Structured error context
    - Severity classification
    - UI-friendly formatting
    """

    __slots__ = ("context", "severity", "category")

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.SEARCH,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
        }
        if self.context.operation:
            result["operation"] = self.context.operation
        if self.context.source:
            result["source"] = self.context.source
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        return result


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(UnifiedSearchError):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
        )


class InvalidQueryError(ValidationError):
    """Raised when the search query is unusable."""

    def __init__(
        self,
        query: str | None,
        reason: str = "Query cannot be empty",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = (context or ErrorContext()).evolve(
            input_value=query,
            suggestion=(context.suggestion if context else None) or "Provide at least one search term",
        )
        super().__init__(f"Invalid query: {reason}", context=ctx)


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = (context or ErrorContext()).evolve(
            input_value=value,
            suggestion=f"Expected {expected}",
        )
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )
        self.param_name = param_name


# =============================================================================
# Data Errors
# =============================================================================

class DataError(UnifiedSearchError):
    """Base class for source-data errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
        )


class SnapshotDataError(DataError):
    """Raised when a snapshot record cannot be read."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Malformed snapshot data: {message}"
        if source:
            full_msg = f"Malformed snapshot data ({source}): {message}"
        ctx = (context or ErrorContext()).evolve(source=source)
        super().__init__(full_msg, context=ctx)


class SourceMatchError(DataError):
    """A single source matcher failed; the rest of the search continues."""

    def __init__(
        self,
        source: str,
        cause: Exception,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = (context or ErrorContext()).evolve(
            operation="match",
            source=source,
            related_errors=(cause,),
        )
        super().__init__(f"{source} matcher failed: {cause}", context=ctx)
        self.severity = ErrorSeverity.WARNING
        self.cause = cause


class SnapshotMissingError(UnifiedSearchError):
    """Raised when a search is started without a snapshot."""

    def __init__(
        self,
        message: str = "A searchable snapshot is required",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.DATA,
        )


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(UnifiedSearchError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
        )


# =============================================================================
# Multi-Error Handling (Python 3.11+ ExceptionGroup)
# =============================================================================

def create_error_group(
    message: str,
    errors: list[Exception],
) -> ExceptionGroup[Exception]:
    """
    Create an ExceptionGroup from multiple matcher failures.

    Example:
        try:
            raise create_error_group("sources failed", failures)
        except* SourceMatchError as eg:
            for exc in eg.exceptions:
                log_error(exc)
    """
    return ExceptionGroup(message, errors)
