"""
Retry executor for fallible asynchronous operations.

Wraps navigation and other network-bound browser calls with bounded retry,
exponential backoff and jitter. Built on tenacity's AsyncRetrying so the
stop/wait/retry policies stay composable, with a custom wait strategy that
implements the workflow delay formula in milliseconds.

Key features:
- Exponential backoff: base_delay_ms * backoff_factor^(attempt-1)
- Signed jitter of +/-10% of the exponential term to avoid retry storms
- Delay capped at max_delay_ms
- Pluggable retryability predicate (default: transient network/timeout errors)
- The caller always sees the operation's own last error, never a wrapper
- Optional stop event: once set, no further attempt is started

Transient failures are an explicit, closed set of tags (TransientFailure).
Typed exceptions are classified first; message fragments are the fallback
for driver errors that only carry text (Playwright, browsers' net::ERR_*).

Example:
    >>> options = RetryOptions(max_attempts=3, base_delay_ms=10)
    >>> await with_retry(lambda: page.goto("https://example.com"), options)
"""

import asyncio
import functools
import logging
import random
import socket
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    stop_when_event_set,
)
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ============================================================================
# RETRY CONSTANTS
# ============================================================================

# Total attempts including the first one
DEFAULT_MAX_ATTEMPTS = 3

# Delay before the second attempt (milliseconds)
DEFAULT_BASE_DELAY_MS = 1000

# Growth factor applied per attempt
DEFAULT_BACKOFF_FACTOR = 2.0

# Upper bound for any single delay (milliseconds)
DEFAULT_MAX_DELAY_MS = 30000

# Jitter spans 20% of the exponential term, centred on zero (+/-10%)
JITTER_SPAN = 0.2


# ============================================================================
# ERROR CLASSIFICATION
# ============================================================================


class TransientFailure(str, Enum):
    """
    Closed set of transient failure categories eligible for retry.

    Declaration order is the matching order: specific categories come
    before the generic NETWORK and TIMEOUT buckets.
    """

    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_RESET = "connection_reset"
    NETWORK_UNREACHABLE = "network_unreachable"
    SOCKET_HANG_UP = "socket_hang_up"
    DNS_TEMPORARY_FAILURE = "dns_temporary_failure"
    OPERATION_TIMED_OUT = "operation_timed_out"
    BROKEN_PIPE = "broken_pipe"
    NETWORK = "network"
    TIMEOUT = "timeout"
    ABORT = "abort"


# Lowercase message fragments identifying each category
TRANSIENT_MESSAGE_FRAGMENTS: dict[TransientFailure, tuple[str, ...]] = {
    TransientFailure.CONNECTION_REFUSED: ("econnrefused", "connection refused"),
    TransientFailure.CONNECTION_RESET: ("econnreset", "connection reset"),
    TransientFailure.NETWORK_UNREACHABLE: ("enetunreach",),
    TransientFailure.SOCKET_HANG_UP: ("socket hang up",),
    TransientFailure.DNS_TEMPORARY_FAILURE: ("temporary failure in name resolution",),
    TransientFailure.OPERATION_TIMED_OUT: ("etimedout", "operation timed out"),
    TransientFailure.BROKEN_PIPE: ("epipe", "broken pipe"),
    TransientFailure.NETWORK: ("network",),
    TransientFailure.TIMEOUT: ("timeout",),
    TransientFailure.ABORT: ("abort",),
}

# Exception types that are transient regardless of their message.
# Subclasses must precede their bases (ConnectionRefusedError before OSError users).
TRANSIENT_EXCEPTION_TYPES: tuple[tuple[type[BaseException], TransientFailure], ...] = (
    (ConnectionRefusedError, TransientFailure.CONNECTION_REFUSED),
    (ConnectionResetError, TransientFailure.CONNECTION_RESET),
    (BrokenPipeError, TransientFailure.BROKEN_PIPE),
    (TimeoutError, TransientFailure.TIMEOUT),
    (httpx.TimeoutException, TransientFailure.TIMEOUT),
    (httpx.NetworkError, TransientFailure.NETWORK),
)


def classify_error(error: object) -> TransientFailure | None:
    """
    Classify an error into a transient failure category.

    Args:
        error: Anything that was raised (or passed in by a caller)

    Returns:
        The matching TransientFailure, or None when the error is fatal.
        Values that are not exceptions always classify as None.

    Examples:
        >>> classify_error(ConnectionResetError())
        <TransientFailure.CONNECTION_RESET: 'connection_reset'>
        >>> classify_error(RuntimeError("Network error"))
        <TransientFailure.NETWORK: 'network'>
        >>> classify_error(ValueError("Invalid selector")) is None
        True
    """
    if not isinstance(error, BaseException):
        return None

    for exc_type, category in TRANSIENT_EXCEPTION_TYPES:
        if isinstance(error, exc_type):
            return category

    if isinstance(error, socket.gaierror) and error.errno == socket.EAI_AGAIN:
        return TransientFailure.DNS_TEMPORARY_FAILURE

    message = str(error).lower()
    if not message:
        return None

    for category, fragments in TRANSIENT_MESSAGE_FRAGMENTS.items():
        if any(fragment in message for fragment in fragments):
            return category

    return None


def is_network_error(error: object) -> bool:
    """Default retryability predicate: True for transient network/timeout errors."""
    return classify_error(error) is not None


# ============================================================================
# OPTIONS AND DELAY
# ============================================================================


@dataclass
class RetryOptions:
    """
    Configuration for one protected call.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        base_delay_ms: Delay before the second attempt, before jitter
        backoff_factor: Multiplier applied per attempt (>= 1)
        max_delay_ms: Cap applied after jitter
        is_retryable: Predicate deciding whether an error may be retried
        stop_event: Optional event (asyncio.Event or threading.Event); once
            set, the next failure propagates without further attempts
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS
    is_retryable: Callable[[BaseException], bool] = field(default=is_network_error)
    stop_event: Any = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got: {self.max_attempts}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got: {self.base_delay_ms}")
        if self.backoff_factor < 1:
            raise ValueError(f"backoff_factor must be >= 1, got: {self.backoff_factor}")
        if self.max_delay_ms < 0:
            raise ValueError(f"max_delay_ms must be >= 0, got: {self.max_delay_ms}")


def calculate_delay_ms(
    attempt: int,
    base_delay_ms: float,
    backoff_factor: float,
    max_delay_ms: float,
    rng: Callable[[], float] = random.random,
) -> float:
    """
    Compute the delay that follows a failed attempt.

    delay = min(base * factor^(attempt-1) + jitter, max_delay)
    jitter = exponential * 0.2 * (rng() - 0.5)

    Args:
        attempt: 1-based number of the attempt that just failed
        base_delay_ms: Base delay in milliseconds
        backoff_factor: Exponential growth factor
        max_delay_ms: Cap in milliseconds
        rng: Uniform [0, 1) source, injectable for tests

    Returns:
        Delay in milliseconds

    Examples:
        >>> calculate_delay_ms(1, 1000, 2, 30000, rng=lambda: 0.5)
        1000.0
        >>> calculate_delay_ms(3, 1000, 2, 30000, rng=lambda: 0.5)
        4000.0
        >>> calculate_delay_ms(10, 1000, 2, 30000, rng=lambda: 0.5)
        30000
    """
    exponential = base_delay_ms * backoff_factor ** (attempt - 1)
    jitter = exponential * JITTER_SPAN * (rng() - 0.5)
    return min(exponential + jitter, max_delay_ms)


class wait_backoff_jitter(wait_base):  # noqa: N801 - tenacity naming convention
    """Tenacity wait strategy implementing calculate_delay_ms (returns seconds)."""

    def __init__(
        self,
        base_delay_ms: float,
        backoff_factor: float,
        max_delay_ms: float,
        rng: Callable[[], float] = random.random,
    ):
        self.base_delay_ms = base_delay_ms
        self.backoff_factor = backoff_factor
        self.max_delay_ms = max_delay_ms
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        delay_ms = calculate_delay_ms(
            retry_state.attempt_number,
            self.base_delay_ms,
            self.backoff_factor,
            self.max_delay_ms,
            self.rng,
        )
        return delay_ms / 1000


# ============================================================================
# EXECUTOR
# ============================================================================


def _log_before_sleep(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed with retryable error, "
        f"retrying in {delay * 1000:.0f}ms: {error}"
    )


def build_retrying(
    options: RetryOptions,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rng: Callable[[], float] = random.random,
) -> AsyncRetrying:
    """
    Create a tenacity AsyncRetrying configured from RetryOptions.

    Args:
        options: Retry configuration
        sleep: Async sleep function taking seconds (injectable for tests)
        rng: Jitter source

    Returns:
        AsyncRetrying instance with reraise=True
    """
    stop = stop_after_attempt(options.max_attempts)
    if options.stop_event is not None:
        stop = stop | stop_when_event_set(options.stop_event)

    return AsyncRetrying(
        stop=stop,
        wait=wait_backoff_jitter(
            options.base_delay_ms,
            options.backoff_factor,
            options.max_delay_ms,
            rng,
        ),
        retry=retry_if_exception(options.is_retryable),
        sleep=sleep,
        before_sleep=_log_before_sleep,
        reraise=True,
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: RetryOptions | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rng: Callable[[], float] = random.random,
) -> T:
    """
    Run an async operation with bounded retry, backoff and jitter.

    A success returns immediately. A non-retryable error propagates on the
    attempt that raised it. A retryable error on the final attempt
    propagates as-is.

    Args:
        operation: Zero-argument callable returning an awaitable
        options: Retry configuration (defaults to RetryOptions())
        sleep: Async sleep function taking seconds
        rng: Jitter source

    Returns:
        Result of the first successful attempt

    Raises:
        The operation's last error, unchanged

    Example:
        >>> result = await with_retry(fetch, RetryOptions(max_attempts=5))
    """
    options = options or RetryOptions()
    retrying = build_retrying(options, sleep=sleep, rng=rng)

    # AsyncRetrying only awaits coroutine functions, so lambdas and partials
    # returning an awaitable go through a coroutine function
    async def attempt() -> T:
        return await operation()

    return await retrying(attempt)


def retryable(options: RetryOptions | None = None):
    """
    Decorator factory applying with_retry to an async function.

    Example:
        >>> @retryable(RetryOptions(max_attempts=5))
        ... async def open_dashboard(page):
        ...     return await page.goto("https://example.com/dashboard")
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await with_retry(lambda: fn(*args, **kwargs), options)

        return wrapper

    return decorator
