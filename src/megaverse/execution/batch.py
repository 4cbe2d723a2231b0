"""Batch Runner — run every planned action under a limiter with retries.

WHY
───
A goal map plans hundreds of independent create calls.  They must run
with bounded parallelism, each one retried on transient failures, and a
single broken action must never take its siblings down with it.

ARCHITECTURE
────────────
::

    BatchRunner(concurrency, policy, observer)
      ├── .run_all(actions)  ─ asyncio.gather over every action:
      │                          limiter.run(→ with_retry(action.run))
      │                        outcome recorded per action, never re-raised
      └── BatchResult        ─ succeeded / failed / outcomes

    list_only(actions)       ─ labels in plan order, no side effects

The gather at the end of ``run_all`` is the only join point: the call
returns once every action is terminal (succeeded, failed fatally, or out
of retries).

Example::

    result = await run_all(plan.actions, concurrency=8,
                           policy=RetryPolicy(retries=6, base_ms=900))
    print(result.succeeded, result.failed)
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from megaverse.core.errors import RetriesExhaustedError
from megaverse.core.logging import LogContext, get_logger
from megaverse.domain.plan import Action
from megaverse.execution.limiter import Limiter
from megaverse.execution.observer import BatchObserver, NullObserver
from megaverse.execution.retry import RetryPolicy

logger = get_logger(__name__)


@dataclass
class ActionOutcome:
    """Terminal state of one action."""

    action: Action
    succeeded: bool
    attempts: int
    error: BaseException | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def status(self) -> str:
        return "succeeded" if self.succeeded else "failed"

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class BatchResult:
    """Aggregate result of running a batch."""

    batch_id: str
    outcomes: list[ActionOutcome]
    started_at: datetime
    completed_at: datetime

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    def failures(self) -> list[ActionOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / JSON output."""
        return {
            "batch_id": self.batch_id,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "duration_seconds": self.duration_seconds,
            "failures": [
                {
                    "action": o.action.describe,
                    "attempts": o.attempts,
                    "error": str(o.error),
                }
                for o in self.failures()
            ],
        }


def _notify(hook: Callable[..., None], *args: Any) -> None:
    try:
        hook(*args)
    except Exception:
        logger.warning("batch.observer_failed", hook=getattr(hook, "__name__", repr(hook)), exc_info=True)


class BatchRunner:
    """Runs actions concurrently behind one :class:`Limiter`.

    Parameters
    ----------
    concurrency : int
        Maximum actions in flight; validated by the limiter (``>= 1``).
    policy : RetryPolicy
        Retry budget applied to each action independently.
    observer : BatchObserver, optional
        Receives retry / success / failure events.
    """

    def __init__(
        self,
        concurrency: int,
        policy: RetryPolicy | None = None,
        observer: BatchObserver | None = None,
        **retry_kwargs: Any,
    ) -> None:
        self._limiter = Limiter(concurrency)
        self._policy = policy or RetryPolicy()
        self._observer = observer or NullObserver()
        self._retry_kwargs = retry_kwargs
        self._batch_id = str(uuid.uuid4())

    @property
    def batch_id(self) -> str:
        return self._batch_id

    @property
    def limiter(self) -> Limiter:
        return self._limiter

    async def _run_one(self, action: Action) -> ActionOutcome:
        attempts = 1

        def on_retry(error: BaseException, attempt: int) -> None:
            nonlocal attempts
            attempts = attempt + 1
            _notify(self._observer.on_retry, action, error, attempt)

        async def guarded() -> ActionOutcome:
            started_at = datetime.now(UTC)
            try:
                await self._policy.run(action.run, on_retry, **self._retry_kwargs)
            except Exception as e:
                error = e.last_error if isinstance(e, RetriesExhaustedError) else e
                logger.debug(
                    "batch.action_failed",
                    action=action.describe,
                    attempts=attempts,
                    error=str(error),
                )
                _notify(self._observer.on_failure, action, e)
                return ActionOutcome(action, False, attempts, e, started_at, datetime.now(UTC))
            _notify(self._observer.on_success, action)
            return ActionOutcome(action, True, attempts, None, started_at, datetime.now(UTC))

        return await self._limiter.run(guarded)

    async def run_all(self, actions: Sequence[Action]) -> BatchResult:
        """Run every action and wait until all of them are terminal."""
        started_at = datetime.now(UTC)
        async with LogContext(batch_id=self._batch_id):
            logger.info(
                "batch.start",
                actions=len(actions),
                concurrency=self._limiter.max,
                retries=self._policy.retries,
            )
            outcomes = await asyncio.gather(*(self._run_one(a) for a in actions))
            result = BatchResult(
                batch_id=self._batch_id,
                outcomes=list(outcomes),
                started_at=started_at,
                completed_at=datetime.now(UTC),
            )
            logger.info(
                "batch.complete",
                succeeded=result.succeeded,
                failed=result.failed,
                duration_seconds=round(result.duration_seconds, 3),
            )
        return result


async def run_all(
    actions: Sequence[Action],
    concurrency: int,
    policy: RetryPolicy | None = None,
    observer: BatchObserver | None = None,
    **retry_kwargs: Any,
) -> BatchResult:
    """Run ``actions`` with bounded concurrency; see :class:`BatchRunner`."""
    runner = BatchRunner(concurrency, policy, observer, **retry_kwargs)
    return await runner.run_all(actions)


def list_only(actions: Sequence[Action]) -> list[str]:
    """Labels of ``actions`` in plan order. Runs nothing."""
    return [a.describe for a in actions]


__all__ = [
    "ActionOutcome",
    "BatchResult",
    "BatchRunner",
    "list_only",
    "run_all",
]
