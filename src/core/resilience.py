"""Retry, timeout, debounce and caching helpers for remote calls.

All helpers are asyncio-native. A call wrapped with :func:`with_retry` is
attempted up to ``max_attempts`` times with exponential backoff
(``base_delay_ms * 2 ** (attempt - 1)``). Errors that cannot succeed on a
second try (authentication, permission, not-found and validation failures)
are raised immediately without sleeping.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

import orjson
import structlog

from core.config import settings
from core.error_tracking import IErrorTracker, get_error_tracker
from core.exceptions import (
    AppException,
    AuthenticationError,
    NotFoundError,
    OperationTimeoutError,
    PermissionDeniedError,
)

logger = structlog.get_logger()

T = TypeVar("T")

_NON_RETRIABLE_TYPES: tuple[type[BaseException], ...] = (
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
)

_NON_RETRIABLE_MARKERS = ("unauthorized", "forbidden", "not found", "invalid", "validation")

# Client errors that can succeed on a later attempt
_RETRIABLE_CLIENT_STATUSES = frozenset({408, 429})


def is_retriable(error: BaseException) -> bool:
    """Return False for errors that will fail the same way on every attempt."""
    if isinstance(error, _NON_RETRIABLE_TYPES):
        return False
    if (
        isinstance(error, AppException)
        and 400 <= error.status_code < 500
        and error.status_code not in _RETRIABLE_CLIENT_STATUSES
    ):
        return False
    message = str(error).lower()
    return not any(marker in message for marker in _NON_RETRIABLE_MARKERS)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    context: str = "unknown",
    max_attempts: int | None = None,
    base_delay_ms: int | None = None,
    exponential_backoff: bool = True,
    tracker: IErrorTracker | None = None,
    passthrough: tuple[type[BaseException], ...] = (),
) -> T:
    """Call ``fn`` until it succeeds, a non-retriable error occurs, or attempts run out.

    On exhaustion the last error is reported to the error tracker with the
    attempt count and ``context`` tag, then re-raised. Errors matching
    ``passthrough`` are raised on the spot, without retrying or reporting,
    for callers that treat them as an expected outcome.
    """
    max_attempts = settings.retry_max_attempts if max_attempts is None else max_attempts
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    base_delay_ms = settings.retry_base_delay_ms if base_delay_ms is None else base_delay_ms

    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn()
        except passthrough:
            raise
        except Exception as exc:
            if not is_retriable(exc):
                raise
            logger.warning(
                "retry_attempt_failed",
                context=context,
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(exc),
            )
            if attempt >= max_attempts:
                (tracker or get_error_tracker()).capture_error(
                    exc,
                    {"context": context, "attempts": attempt, "max_attempts": max_attempts},
                )
                raise
            delay_ms = base_delay_ms
            if exponential_backoff:
                delay_ms *= 2 ** (attempt - 1)
            await asyncio.sleep(delay_ms / 1000)


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_ms: int | None = None,
    context: str = "operation",
) -> T:
    """Await ``awaitable`` for at most ``timeout_ms``.

    Expiry cancels the awaitable and raises :class:`OperationTimeoutError`.
    The remote side may still have applied the write.
    """
    timeout_ms = settings.bootstrap_timeout_ms if timeout_ms is None else timeout_ms
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as exc:
        raise OperationTimeoutError(context, timeout_ms) from exc


async def with_retry_and_timeout(
    fn: Callable[[], Awaitable[T]],
    timeout_ms: int | None = None,
    *,
    context: str = "operation",
    max_attempts: int | None = None,
    base_delay_ms: int | None = None,
    tracker: IErrorTracker | None = None,
    passthrough: tuple[type[BaseException], ...] = (),
) -> T:
    """Retry ``fn`` with a fresh per-attempt timeout."""
    timeout_ms = settings.request_timeout_ms if timeout_ms is None else timeout_ms
    return await with_retry(
        lambda: with_timeout(fn(), timeout_ms, context),
        context=context,
        max_attempts=max_attempts,
        base_delay_ms=base_delay_ms,
        tracker=tracker,
        passthrough=passthrough,
    )


class Debounced:
    """Callable that postpones ``fn`` until ``delay_ms`` passes without another call.

    Only the arguments of the last call are used. Coroutine results are
    scheduled as tasks on the running loop.
    """

    def __init__(self, fn: Callable[..., Any], delay_ms: int) -> None:
        self._fn = fn
        self._delay = delay_ms / 1000
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, args, kwargs)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self._handle = None
        result = self._fn(*args, **kwargs)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)


def debounce(fn: Callable[..., Any], delay_ms: int) -> Debounced:
    """Wrap ``fn`` so bursts of calls collapse into one trailing call."""
    return Debounced(fn, delay_ms)


def _cache_key(args: tuple[Any, ...], kwargs: dict[str, Any]) -> bytes:
    return orjson.dumps(
        [list(args), kwargs],
        default=str,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def ttl_cache(
    ttl_seconds: float | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Cache an async function's results in memory for ``ttl_seconds``.

    Entries are keyed by the JSON serialization of the call arguments.
    Exceptions are not cached. The wrapper exposes ``cache_clear()``.
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        ttl = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        entries: dict[bytes, tuple[float, T]] = {}

        @wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            key = _cache_key(args, kwargs)
            now = time.monotonic()
            cached = entries.get(key)
            if cached is not None and cached[0] > now:
                return cached[1]
            result = await fn(*args, **kwargs)
            entries[key] = (now + ttl, result)
            return result

        wrapper.cache_clear = entries.clear  # type: ignore[attr-defined]
        return wrapper

    return decorator
