"""Unit tests for retry, timeout, debounce and cache helpers."""

import asyncio
from typing import Any

import pytest

from core.exceptions import (
    AppException,
    ErrorCode,
    NotFoundError,
    OperationTimeoutError,
    PermissionDeniedError,
    ValidationError,
)
from core.resilience import (
    debounce,
    is_retriable,
    ttl_cache,
    with_retry,
    with_retry_and_timeout,
    with_timeout,
)


class RecordingTracker:
    def __init__(self) -> None:
        self.captured: list[tuple[BaseException, dict[str, Any] | None]] = []

    def capture_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        self.captured.append((error, context))


class Flaky:
    """Fails ``failures`` times with ``error`` before returning ``result``."""

    def __init__(self, failures: int, error: Exception, result: str = "ok") -> None:
        self.calls = 0
        self._failures = failures
        self._error = error
        self._result = result

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self._failures:
            raise self._error
        return self._result


class TestIsRetriable:
    @pytest.mark.parametrize(
        "error",
        [
            PermissionDeniedError(),
            NotFoundError(ErrorCode.TEAM_NOT_FOUND, "Team"),
            ValidationError("bad input"),
            AppException(ErrorCode.DUPLICATE_ROLE, "Role exists", 409),
            RuntimeError("Unauthorized"),
            RuntimeError("row not found"),
        ],
    )
    def test_non_retriable(self, error: Exception):
        assert not is_retriable(error)

    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError("connection reset"),
            AppException(ErrorCode.RATE_LIMIT_EXCEEDED, "Too many requests", 429),
            AppException(ErrorCode.NETWORK_ERROR, "Network error", 503),
            OperationTimeoutError("get_teams", 100),
        ],
    )
    def test_retriable(self, error: Exception):
        assert is_retriable(error)


class TestWithRetry:
    async def test_succeeds_after_transient_failures(self):
        fn = Flaky(2, RuntimeError("connection reset"))
        result = await with_retry(fn, max_attempts=3, base_delay_ms=0)
        assert result == "ok"
        assert fn.calls == 3

    async def test_non_retriable_raises_immediately(self):
        fn = Flaky(5, PermissionDeniedError())
        tracker = RecordingTracker()
        with pytest.raises(PermissionDeniedError):
            await with_retry(fn, max_attempts=3, base_delay_ms=0, tracker=tracker)
        assert fn.calls == 1
        assert tracker.captured == []

    async def test_exhaustion_reports_and_reraises(self):
        error = RuntimeError("connection reset")
        fn = Flaky(5, error)
        tracker = RecordingTracker()
        with pytest.raises(RuntimeError):
            await with_retry(fn, context="load_roster", max_attempts=2, base_delay_ms=0, tracker=tracker)
        assert fn.calls == 2
        [(captured, context)] = tracker.captured
        assert captured is error
        assert context == {"context": "load_roster", "attempts": 2, "max_attempts": 2}

    async def test_backoff_doubles(self, monkeypatch: pytest.MonkeyPatch):
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)
        with pytest.raises(RuntimeError):
            await with_retry(
                Flaky(5, RuntimeError("boom")),
                max_attempts=3,
                base_delay_ms=100,
                tracker=RecordingTracker(),
            )
        assert delays == [0.1, 0.2]

    async def test_passthrough_errors_skip_retry_and_tracking(self):
        fn = Flaky(5, OperationTimeoutError("get_teams", 20))
        tracker = RecordingTracker()
        with pytest.raises(OperationTimeoutError):
            await with_retry(
                fn,
                max_attempts=3,
                base_delay_ms=0,
                tracker=tracker,
                passthrough=(OperationTimeoutError,),
            )
        assert fn.calls == 1
        assert tracker.captured == []

    async def test_passthrough_leaves_other_errors_retriable(self):
        fn = Flaky(1, RuntimeError("connection reset"))
        result = await with_retry(
            fn, max_attempts=3, base_delay_ms=0, passthrough=(OperationTimeoutError,)
        )
        assert result == "ok"
        assert fn.calls == 2

    async def test_single_attempt_reports_first_failure(self):
        fn = Flaky(5, RuntimeError("connection reset"))
        tracker = RecordingTracker()
        with pytest.raises(RuntimeError):
            await with_retry(fn, max_attempts=1, base_delay_ms=0, tracker=tracker)
        assert fn.calls == 1
        assert tracker.captured[0][1] == {"context": "unknown", "attempts": 1, "max_attempts": 1}

    async def test_zero_attempts_is_rejected(self):
        fn = Flaky(0, RuntimeError("unused"))
        with pytest.raises(ValueError):
            await with_retry(fn, max_attempts=0)
        assert fn.calls == 0


class TestWithTimeout:
    async def test_returns_result(self):
        async def quick() -> int:
            return 7

        assert await with_timeout(quick(), 1000) == 7

    async def test_raises_operation_timeout(self):
        async def slow() -> None:
            await asyncio.sleep(1)

        with pytest.raises(OperationTimeoutError) as exc_info:
            await with_timeout(slow(), 10, context="get_teams")
        assert exc_info.value.status_code == 504
        assert exc_info.value.error_code == ErrorCode.TIMEOUT

    async def test_fresh_timeout_per_attempt(self):
        calls = 0

        async def slow_then_fast() -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.sleep(1)
            return "done"

        result = await with_retry_and_timeout(
            slow_then_fast, 20, max_attempts=2, base_delay_ms=0, tracker=RecordingTracker()
        )
        assert result == "done"
        assert calls == 2


class TestDebounce:
    async def test_collapses_bursts_into_last_call(self):
        seen: list[int] = []
        debounced = debounce(seen.append, 20)

        debounced(1)
        debounced(2)
        debounced(3)
        assert debounced.pending
        await asyncio.sleep(0.06)

        assert seen == [3]
        assert not debounced.pending

    async def test_runs_coroutines(self):
        done = asyncio.Event()

        async def refresh() -> None:
            done.set()

        debounce(refresh, 5)()
        await asyncio.wait_for(done.wait(), 1)

    async def test_cancel(self):
        seen: list[int] = []
        debounced = debounce(seen.append, 10)
        debounced(1)
        debounced.cancel()
        await asyncio.sleep(0.03)
        assert seen == []


class TestTtlCache:
    async def test_caches_by_arguments(self):
        calls: list[str] = []

        @ttl_cache(60)
        async def load(team: str) -> str:
            calls.append(team)
            return team.upper()

        assert await load("a") == "A"
        assert await load("a") == "A"
        assert await load("b") == "B"
        assert calls == ["a", "b"]

    async def test_expired_entries_reload(self):
        calls = 0

        @ttl_cache(0)
        async def load() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await load() == 1
        assert await load() == 2

    async def test_errors_are_not_cached(self):
        fn = Flaky(1, RuntimeError("boom"))
        cached = ttl_cache(60)(fn)
        with pytest.raises(RuntimeError):
            await cached()
        assert await cached() == "ok"

    async def test_cache_clear(self):
        calls = 0

        @ttl_cache(60)
        async def load() -> int:
            nonlocal calls
            calls += 1
            return calls

        await load()
        load.cache_clear()  # type: ignore[attr-defined]
        assert await load() == 2
