"""
Async Utilities for Provider Fan-out.

Provides:
- Per-branch timeout with fallback
- Isolated parallel execution with an optional overall deadline
- Circuit breaker for unreachable remote sources
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from .exceptions import ErrorContext, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Timeouts
# =============================================================================


async def timeout_with_fallback(
    coro: Awaitable[T],
    timeout: float | None,
    fallback: T | Callable[[], T],
) -> T:
    """
    Execute coroutine with timeout and fallback.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds (None waits forever)
        fallback: Value or callable to return on timeout

    Returns:
        Result or fallback value
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError:
        if callable(fallback):
            return fallback()
        return fallback


# =============================================================================
# Isolated Parallel Execution
# =============================================================================


async def gather_isolated(
    coros: Sequence[Awaitable[T]],
    deadline: float | None = None,
) -> list[T | BaseException | None]:
    """
    Run coroutines concurrently; one failure never affects the others.

    Results keep the input order. A branch that raised yields its exception.
    If ``deadline`` elapses, branches still pending are cancelled and yield
    None; branches that already finished keep their results.

    Example:
        results = await gather_isolated(
            [provider_a.search(q), provider_b.search(q)],
            deadline=6.0,
        )
    """
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, timeout=deadline)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    for task in pending:
        task.cancel()
    if pending:
        logger.warning(f"Fan-out deadline reached, abandoning {len(pending)} pending branch(es)")

    results: list[T | BaseException | None] = []
    for task in tasks:
        if task not in done:
            results.append(None)
        elif task.cancelled():
            results.append(asyncio.CancelledError())
        else:
            exc = task.exception()
            results.append(exc if exc is not None else task.result())
    return results


# =============================================================================
# Per-source Circuit Breaker
# =============================================================================


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """
    Stops calling a remote source that keeps failing.

    After ``failure_threshold`` failures the breaker opens and every call is
    refused with RateLimitError until ``recovery_timeout`` has passed. Then a
    limited number of trial calls go through: one success closes the breaker,
    one failure opens it again. Successes while closed slowly pay down the
    failure count.

    Example:
        breaker = CircuitBreaker(source_name="footeducation.com")

        async with breaker:
            response = await client.get(url)
    """

    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    trial_calls: int = 1
    source_name: str = ""

    _failure_count: int = field(init=False, default=0)
    _last_failure_time: float | None = field(init=False, default=None)
    _state: str = field(init=False, default=BreakerState.CLOSED)
    _trials_started: int = field(init=False, default=0)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @property
    def state(self) -> str:
        return self._state

    def _cooled_down(self) -> bool:
        return (
            self._last_failure_time is not None
            and time.monotonic() - self._last_failure_time > self.recovery_timeout
        )

    @property
    def is_open(self) -> bool:
        """True while calls are refused outright."""
        return self._state == BreakerState.OPEN and not self._cooled_down()

    def _refuse(self, message: str, retry_after: float) -> RateLimitError:
        return RateLimitError(
            f"{self.source_name}: {message}" if self.source_name else message,
            retry_after=retry_after,
            context=ErrorContext(source_name=self.source_name or None),
        )

    async def __aenter__(self) -> CircuitBreaker:
        async with self._lock:
            if self.is_open:
                raise self._refuse("circuit open", self.recovery_timeout)

            if self._state == BreakerState.OPEN:
                self._state = BreakerState.HALF_OPEN
                self._trials_started = 0

            if self._state == BreakerState.HALF_OPEN:
                if self._trials_started >= self.trial_calls:
                    raise self._refuse("circuit probing, trial call in flight", self.recovery_timeout / 2)
                self._trials_started += 1

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        async with self._lock:
            if exc_val is None:
                self._record_success()
            else:
                self._record_failure()

    def _record_success(self) -> None:
        if self._state == BreakerState.HALF_OPEN:
            self._state = BreakerState.CLOSED
            self._failure_count = 0
            logger.info(f"{self.source_name or 'source'}: circuit closed, source recovered")
        elif self._failure_count:
            self._failure_count -= 1

    def _record_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = time.monotonic()
        reopen = self._state == BreakerState.HALF_OPEN
        if reopen or self._failure_count >= self.failure_threshold:
            self._state = BreakerState.OPEN
            logger.warning(
                f"{self.source_name or 'source'}: circuit opened after {self._failure_count} failure(s)"
            )
