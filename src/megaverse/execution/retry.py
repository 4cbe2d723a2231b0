"""Retry with jittered exponential backoff for async operations.

Each call to :func:`with_retry` owns its attempt counter; concurrent calls
share nothing, so one policy can wrap any number of in-flight actions.

Classification
──────────────
    RemoteError(status=None)   network fault        → transient
    RemoteError(status=429)    rate limited         → transient
    RemoteError(status>=500)   server error         → transient
    RemoteError(other status)  client error         → fatal, re-raised as is
    other MegaverseError       its ``retryable`` flag
    any other Exception        no status at all     → transient

Schedule
────────
    attempt 0 runs immediately.  Before retry ``n`` (1-based) the executor
    sleeps ``round(random() * base_ms * 2**(n-1))`` milliseconds.  With
    ``retries = r`` at most ``r + 1`` attempts are made; when the last one
    fails transiently a :class:`RetriesExhaustedError` is raised with the
    final failure chained.

Example::

    policy = RetryPolicy(retries=6, base_ms=900)
    await policy.run(lambda: api.create_polyanet(point))

    # or directly
    await with_retry(fetch, retries=4, base_ms=800,
                     on_retry=lambda err, n: print(f"Retry #{n}: {err}"))
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from megaverse.core.errors import MegaverseError, RemoteError, RetriesExhaustedError, status_is_transient
from megaverse.core.logging import get_logger

T = TypeVar("T")

RetryHook = Callable[[BaseException, int], None]

logger = get_logger(__name__)


def is_transient(error: BaseException) -> bool:
    """Decide whether ``error`` is worth another attempt."""
    match error:
        case RemoteError(status=status):
            return status_is_transient(status)
        case MegaverseError(retryable=retryable):
            return retryable
        case _:
            return True


def backoff_delay_ms(attempt: int, base_ms: int, rand: Callable[[], float] = random.random) -> int:
    """Jittered delay before the retry following zero-based ``attempt``."""
    return round(rand() * base_ms * (2 ** attempt))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    retries: int = 6,
    base_ms: int = 250,
    on_retry: RetryHook | None = None,
    *,
    timeout: float | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rand: Callable[[], float] = random.random,
) -> T:
    """Run ``operation`` until it succeeds, fails fatally, or retries run out.

    Args:
        operation: Zero-argument callable returning an awaitable
        retries: Retries allowed after the first attempt (0 = single attempt)
        base_ms: Backoff base in milliseconds
        on_retry: Called as ``on_retry(error, attempt_number)`` before each
            backoff sleep. Exceptions raised by the hook are logged and ignored.
        timeout: Optional per-attempt deadline in seconds; expiry counts as a
            transient failure
        sleep: Awaitable sleep taking seconds (injectable for tests)
        rand: Source of jitter in ``[0, 1)`` (injectable for tests)

    Returns:
        The value of the first successful attempt

    Raises:
        The fatal error unchanged, or RetriesExhaustedError wrapping the last
        transient failure.
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")

    attempt = 0
    while True:
        try:
            if timeout is None:
                return await operation()
            try:
                async with asyncio.timeout(timeout):
                    return await operation()
            except TimeoutError as e:
                raise RemoteError(f"Attempt timed out after {timeout}s", cause=e) from e
        except Exception as err:
            if not is_transient(err):
                raise
            if attempt >= retries:
                raise RetriesExhaustedError(err, attempts=attempt + 1) from err

            delay_ms = backoff_delay_ms(attempt, base_ms, rand)
            if on_retry is not None:
                try:
                    on_retry(err, attempt + 1)
                except Exception:
                    logger.warning("retry.hook_failed", attempt=attempt + 1, exc_info=True)
            logger.debug(
                "retry.scheduled",
                attempt=attempt + 1,
                delay_ms=delay_ms,
                error=str(err),
            )
            await sleep(delay_ms / 1000)
            attempt += 1


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget for one call site.

    Attributes:
        retries: Retries after the first attempt
        base_ms: Backoff base in milliseconds
        timeout: Optional per-attempt deadline in seconds
    """

    retries: int = 6
    base_ms: int = 250
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")
        if self.base_ms < 0:
            raise ValueError(f"base_ms must be >= 0, got {self.base_ms}")

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: RetryHook | None = None,
        **kwargs: Any,
    ) -> T:
        """Shorthand for :func:`with_retry` with this policy's values."""
        return await with_retry(
            operation,
            self.retries,
            self.base_ms,
            on_retry,
            timeout=self.timeout,
            **kwargs,
        )


NO_RETRY = RetryPolicy(retries=0, base_ms=0)

__all__ = [
    "NO_RETRY",
    "RetryHook",
    "RetryPolicy",
    "backoff_delay_ms",
    "is_transient",
    "with_retry",
]
