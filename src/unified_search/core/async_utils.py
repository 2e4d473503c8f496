"""
Async Utilities for concurrent matcher execution.

Python 3.12+ features used:
- asyncio.TaskGroup for structured concurrency (3.11+)
- Type parameter syntax for generic functions

Provides:
- Parallel execution with TaskGroup, results kept in call order
- Timeout with fallback (fail closed)
- Offloading of synchronous, CPU-bound work to worker threads
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def gather_with_errors(
    *coros: Awaitable[T],
    return_exceptions: bool = False,
) -> list[T | Exception]:
    """
    Execute coroutines in parallel using TaskGroup.

    Results are returned in the order the coroutines were given,
    regardless of completion order.

    Args:
        *coros: Coroutines to execute
        return_exceptions: If True, return exceptions instead of raising

    Returns:
        List of results (or exceptions if return_exceptions=True)

    Example:
        results = await gather_with_errors(
            run_rag(),
            run_kg(),
            return_exceptions=True,
        )
    """
    results: list[T | Exception | None] = [None] * len(coros)

    if return_exceptions:
        async def safe_run(coro: Awaitable[T], index: int) -> None:
            try:
                results[index] = await coro
            except Exception as e:
                results[index] = e

        async with asyncio.TaskGroup() as tg:
            for i, coro in enumerate(coros):
                tg.create_task(safe_run(coro, i))
    else:
        # Fail fast on any exception
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(coro) for coro in coros]
        results = [task.result() for task in tasks]

    return results  # type: ignore[return-value]


async def timeout_with_fallback(
    coro: Awaitable[T],
    timeout: float | None,
    fallback: T | Callable[[], T],
) -> T:
    """
    Execute coroutine with timeout and fallback.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds (None waits indefinitely)
        fallback: Value or callable to return on timeout

    Returns:
        Result or fallback value
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError:
        logger.debug("Operation timed out after %.2fs, using fallback", timeout or 0.0)
        if callable(fallback):
            return fallback()
        return fallback


async def run_in_thread(func: Callable[..., T], *args: Any) -> T:
    """Run a synchronous callable in the default worker thread pool."""
    return await asyncio.to_thread(func, *args)
