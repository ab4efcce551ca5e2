"""
Resilience primitives for outbound API calls.

- Retry with exponential backoff and jitter
- Timeouts
- Circuit breaker
- Token bucket rate limiting
- Request batching
- Debouncing

Usage:
    breaker = CircuitBreaker(failure_threshold=5, reset_timeout=60)
    data = await breaker.execute(lambda: with_retry(fetch, RetryOptions(max_attempts=3)))
"""

import asyncio
import functools
import logging
import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    List,
    Optional,
    Set,
    Tuple,
    TypeVar,
)

from .errors import NETWORK_ERROR, TIMEOUT, ApiError, CircuitOpenError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# RETRY
# =============================================================================

def default_retry_condition(error: BaseException) -> bool:
    """Retry server errors, network failures and timeouts."""
    if not isinstance(error, ApiError):
        return False
    if error.status is not None and error.status >= 500:
        return True
    return error.code in (NETWORK_ERROR, TIMEOUT)


@dataclass
class RetryOptions:
    """Backoff settings for with_retry."""
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    jitter: float = 0.25
    retry_condition: Callable[[BaseException], bool] = default_retry_condition
    on_retry: Optional[Callable[[BaseException, int], None]] = None


def calculate_delay(attempt: int, options: RetryOptions) -> float:
    """
    Delay before the retry that follows `attempt` (1-based).

    initial_delay * backoff_multiplier ** (attempt - 1), capped at max_delay,
    then moved by up to +/- jitter of itself.
    """
    delay = min(
        options.initial_delay * options.backoff_multiplier ** (attempt - 1),
        options.max_delay,
    )
    spread = delay * options.jitter * (random.random() * 2 - 1)
    return max(0.0, delay + spread)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
) -> T:
    """
    Await operation() until it succeeds, the retry condition rejects the
    error, or max_attempts is reached. The last error is re-raised.
    """
    options = options or RetryOptions()
    attempt = 0

    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as error:
            if attempt >= options.max_attempts or not options.retry_condition(error):
                raise

            if options.on_retry:
                options.on_retry(error, attempt)

            delay = calculate_delay(attempt, options)
            logger.debug(f"Retry {attempt}/{options.max_attempts - 1} in {delay:.2f}s after: {error}")
            await asyncio.sleep(delay)


async def with_timeout(
    awaitable: Awaitable[T],
    seconds: float,
    timeout_error: Optional[BaseException] = None,
) -> T:
    """Await with a deadline; raises timeout_error (or TimeoutError) when it passes."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise (timeout_error or TimeoutError(f"Operation timed out after {seconds}s")) from e


# =============================================================================
# CIRCUIT BREAKER
# =============================================================================

class CircuitState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """
    Stops calling a failing dependency for a while.

    CLOSED: calls pass; failure_threshold consecutive failures open the circuit.
    OPEN: calls fail fast with CircuitOpenError until reset_timeout has passed.
    HALF_OPEN: a single trial call is let through; success closes the
    circuit, failure opens it again. Other callers fail fast meanwhile.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        on_state_change: Optional[Callable[[CircuitState], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._on_state_change = on_state_change
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failures

    def reset(self) -> None:
        """Force the circuit closed and forget past failures."""
        self._failures = 0
        self._trial_in_flight = False
        self._transition(CircuitState.CLOSED)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self._state is CircuitState.OPEN:
            if self._clock() - self._opened_at < self.reset_timeout:
                raise CircuitOpenError()
            self._transition(CircuitState.HALF_OPEN)

        is_trial = False
        if self._state is CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                raise CircuitOpenError("Circuit breaker is HALF_OPEN; trial call in progress")
            self._trial_in_flight = True
            is_trial = True

        try:
            result = await operation()
        except Exception:
            self._record_failure()
            raise
        else:
            self._record_success()
            return result
        finally:
            if is_trial:
                self._trial_in_flight = False

    def _record_success(self) -> None:
        self._failures = 0
        if self._state is CircuitState.HALF_OPEN:
            self._transition(CircuitState.CLOSED)

    def _record_failure(self) -> None:
        self._failures += 1
        if self._state is CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
            self._opened_at = self._clock()
            self._transition(CircuitState.OPEN)

    def _transition(self, state: CircuitState) -> None:
        if state is self._state:
            return
        previous, self._state = self._state, state
        if state is CircuitState.OPEN:
            logger.warning(f"⚠️ Circuit breaker {previous.value} -> OPEN after {self._failures} failures")
        else:
            logger.info(f"Circuit breaker {previous.value} -> {state.value}")
        if self._on_state_change:
            self._on_state_change(state)


# =============================================================================
# RATE LIMITING
# =============================================================================

@dataclass
class TokenBucket:
    """Token bucket state."""
    tokens: float
    last_update: float

    def refill(self, now: float, rate: float, max_tokens: int) -> None:
        elapsed = now - self.last_update
        self.tokens = min(max_tokens, self.tokens + elapsed * rate)
        self.last_update = now


class RateLimiter:
    """
    Client-side token bucket.

    Holds up to max_tokens; refills at refill_rate tokens per second.
    acquire() waits until enough tokens are available.
    """

    def __init__(
        self,
        max_tokens: int,
        refill_rate: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_tokens < 1 or refill_rate <= 0:
            raise ValueError("max_tokens must be >= 1 and refill_rate > 0")
        self.max_tokens = max_tokens
        self.refill_rate = refill_rate
        self._clock = clock
        self._bucket = TokenBucket(tokens=float(max_tokens), last_update=clock())
        self._lock = asyncio.Lock()

    def available_tokens(self) -> int:
        self._bucket.refill(self._clock(), self.refill_rate, self.max_tokens)
        return math.floor(self._bucket.tokens)

    async def acquire(self, tokens: int = 1) -> None:
        if tokens > self.max_tokens:
            raise ValueError(f"Cannot acquire {tokens} tokens from a bucket of {self.max_tokens}")

        async with self._lock:
            while True:
                self._bucket.refill(self._clock(), self.refill_rate, self.max_tokens)
                if self._bucket.tokens >= tokens:
                    self._bucket.tokens -= tokens
                    return
                shortfall = tokens - self._bucket.tokens
                await asyncio.sleep(shortfall / self.refill_rate)


# =============================================================================
# BATCHING
# =============================================================================

class BatchProcessor(Generic[T, R]):
    """
    Collects items and processes them together.

    A batch is flushed when it reaches max_batch_size or max_wait seconds
    after its first item. process_batch must return one result per item,
    in order. If it raises, every caller in that batch gets the error.
    """

    def __init__(
        self,
        process_batch: Callable[[List[T]], Awaitable[List[R]]],
        max_batch_size: int = 10,
        max_wait: float = 0.1,
    ):
        self._process_batch = process_batch
        self.max_batch_size = max_batch_size
        self.max_wait = max_wait

        self._pending: List[Tuple[T, "asyncio.Future[R]"]] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._running: Set["asyncio.Task[Any]"] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def add(self, item: T) -> R:
        """Queue an item; resolves with its result once its batch is processed."""
        loop = asyncio.get_running_loop()
        future: "asyncio.Future[R]" = loop.create_future()
        self._pending.append((item, future))

        if len(self._pending) >= self.max_batch_size:
            self._dispatch()
        elif self._timer is None:
            self._timer = loop.call_later(self.max_wait, self._dispatch)

        return await future

    async def flush(self) -> None:
        """Process whatever is pending now."""
        batch = self._take_batch()
        if batch:
            await self._run(batch)

    def _take_batch(self) -> List[Tuple[T, "asyncio.Future[R]"]]:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        batch, self._pending = self._pending, []
        return batch

    def _dispatch(self) -> None:
        batch = self._take_batch()
        if not batch:
            return
        task = asyncio.ensure_future(self._run(batch))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, batch: List[Tuple[T, "asyncio.Future[R]"]]) -> None:
        items = [item for item, _ in batch]
        try:
            results = await self._process_batch(items)
            if len(results) != len(items):
                raise ValueError(f"Batch returned {len(results)} results for {len(items)} items")
        except Exception as e:
            logger.warning(f"⚠️ Batch of {len(items)} failed: {e}")
            for _, future in batch:
                if not future.done():
                    future.set_exception(e)
            return

        for (_, future), result in zip(batch, results):
            if not future.done():
                future.set_result(result)


# =============================================================================
# DEBOUNCING
# =============================================================================

class DebouncedError(Exception):
    """Raised to a debounced caller that was superseded by a newer call."""


def debounce_async(
    fn: Callable[..., Awaitable[T]],
    delay: float,
) -> Callable[..., Awaitable[T]]:
    """
    Wrap an async function so only the last of a burst of calls runs.

    Each call restarts a delay-second timer. A caller still waiting when a
    newer call arrives gets DebouncedError; the last caller gets fn's result
    (or its exception). Calls made after fn has started open a new burst and
    leave the running call alone.
    """
    timer: Optional[asyncio.TimerHandle] = None
    waiting: Optional["asyncio.Future[T]"] = None
    running: Set["asyncio.Task[Any]"] = set()

    async def _invoke(future: "asyncio.Future[T]", args: tuple, kwargs: dict) -> None:
        try:
            result = await fn(*args, **kwargs)
        except Exception as e:
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)

    def _fire(future: "asyncio.Future[T]", args: tuple, kwargs: dict) -> None:
        nonlocal timer, waiting
        timer = None
        waiting = None
        task = asyncio.ensure_future(_invoke(future, args, kwargs))
        running.add(task)
        task.add_done_callback(running.discard)

    @functools.wraps(fn)
    async def debounced(*args: Any, **kwargs: Any) -> T:
        nonlocal timer, waiting
        loop = asyncio.get_running_loop()

        if timer is not None:
            timer.cancel()
        if waiting is not None and not waiting.done():
            waiting.set_exception(DebouncedError("Debounced"))

        future: "asyncio.Future[T]" = loop.create_future()
        waiting = future
        timer = loop.call_later(delay, _fire, future, args, kwargs)
        return await future

    return debounced
