"""Tests for async_utils.py: gather, timeout fallback and thread offloading."""

import asyncio
import threading

import pytest

from unified_search.core.async_utils import (
    gather_with_errors,
    run_in_thread,
    timeout_with_fallback,
)


# ============================================================
# gather_with_errors
# ============================================================


class TestGatherWithErrors:
    async def test_results_in_call_order(self):
        async def delayed(value, delay):
            await asyncio.sleep(delay)
            return value

        results = await gather_with_errors(delayed("slow", 0.05), delayed("fast", 0.0))
        assert results == ["slow", "fast"]

    async def test_return_exceptions(self):
        async def ok():
            return 1

        async def fail():
            raise ValueError("boom")

        results = await gather_with_errors(ok(), fail(), return_exceptions=True)
        assert results[0] == 1
        assert isinstance(results[1], ValueError)

    async def test_fail_fast(self):
        async def fail():
            raise ValueError("boom")

        with pytest.raises(ExceptionGroup):
            await gather_with_errors(fail())

    async def test_no_coroutines(self):
        assert await gather_with_errors() == []


# ============================================================
# timeout_with_fallback
# ============================================================


class TestTimeoutWithFallback:
    async def test_completes(self):
        async def quick():
            return "done"

        assert await timeout_with_fallback(quick(), 1.0, "fallback") == "done"

    async def test_fallback_value(self):
        async def slow():
            await asyncio.sleep(1.0)
            return "done"

        assert await timeout_with_fallback(slow(), 0.01, "fallback") == "fallback"

    async def test_fallback_callable(self):
        async def slow():
            await asyncio.sleep(1.0)

        assert await timeout_with_fallback(slow(), 0.01, list) == []

    async def test_no_timeout(self):
        async def quick():
            return 42

        assert await timeout_with_fallback(quick(), None, 0) == 42


# ============================================================
# run_in_thread
# ============================================================


class TestRunInThread:
    async def test_runs_off_loop_thread(self):
        main_thread = threading.get_ident()
        worker_thread = await run_in_thread(threading.get_ident)
        assert worker_thread != main_thread

    async def test_passes_arguments(self):
        assert await run_in_thread(max, 3, 7) == 7

    async def test_propagates_exceptions(self):
        with pytest.raises(ZeroDivisionError):
            await run_in_thread(lambda: 1 / 0)
