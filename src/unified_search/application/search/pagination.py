"""
Paginator - offset/limit windowing.

Policy: negative bounds are rejected with InvalidParameterError and never
clamped; an offset past the end yields an empty page.
"""

from __future__ import annotations

from collections.abc import Sequence

from unified_search.core.exceptions import InvalidParameterError
from unified_search.domain.entities.result import UnifiedResult


def paginate(
    results: Sequence[UnifiedResult],
    offset: int,
    limit: int,
) -> list[UnifiedResult]:
    """
    Return the window ``results[offset:offset + limit]``.

    Raises:
        InvalidParameterError: If offset or limit is negative
    """
    if offset < 0:
        raise InvalidParameterError("offset", offset, "a non-negative integer")
    if limit < 0:
        raise InvalidParameterError("limit", limit, "a non-negative integer")
    return list(results[offset : offset + limit])
