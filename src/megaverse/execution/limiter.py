"""Concurrency Limiter — FIFO gate admitting at most ``max`` tasks at once.

WHY
───
``asyncio.Semaphore`` bounds concurrency but makes no promise about the
order in which waiters are woken relative to newcomers.  The limiter
keeps an explicit queue of waiter futures and hands a freed slot straight
to the head of that queue, so admission is strictly first-come,
first-served and ``active`` never exceeds ``max``.

ARCHITECTURE
────────────
::

    run(task)
      ├── active < max and nobody waiting?  ─ take a slot
      │        else                         ─ append Future, await it
      ├── await task()
      └── finally: release
             ├── waiter queued?  ─ resolve head Future (slot handed over,
             │                     active unchanged)
             └── else            ─ active -= 1

    Invariants (checked by tests):
      0 <= active <= max
      waiting == 0 whenever active < max

All state changes happen between suspension points on a single event
loop, so no lock is needed.

Example::

    limiter = Limiter(8)
    results = await asyncio.gather(*(limiter.run(job) for job in jobs))
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TypeVar

from megaverse.core.errors import LimiterConfigError

T = TypeVar("T")


class Limiter:
    """FIFO concurrency limiter.

    Parameters
    ----------
    max : int
        Number of slots; must be at least 1.
    """

    def __init__(self, max: int) -> None:  # noqa: A002
        if isinstance(max, bool) or not isinstance(max, int) or max < 1:
            raise LimiterConfigError(f"Concurrency must be >= 1, got {max!r}")
        self._max = max
        self._active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    # ── Inspection ───────────────────────────────────────────────────

    @property
    def max(self) -> int:
        return self._max

    @property
    def active(self) -> int:
        """Tasks currently holding a slot."""
        return self._active

    @property
    def waiting(self) -> int:
        """Callers queued for a slot."""
        return len(self._waiters)

    # ── Execution ────────────────────────────────────────────────────

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` once a slot is free and return its result.

        The task's exception, if any, propagates unchanged; the slot is
        released either way.
        """
        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self._active < self._max and not self._waiters:
            self._active += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over before the cancellation landed
                self._release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active -= 1

    def __repr__(self) -> str:
        return f"Limiter(max={self._max}, active={self._active}, waiting={self.waiting})"
