"""
megaverse.execution - the execution core.

Bounded concurrency (:class:`Limiter`), jittered exponential retry
(:func:`with_retry`) and the batch runner that composes them over a list
of planned actions.  Nothing in this package knows about HTTP.
"""

from megaverse.execution.batch import ActionOutcome, BatchResult, BatchRunner, list_only, run_all
from megaverse.execution.limiter import Limiter
from megaverse.execution.observer import (
    BatchEvent,
    BatchObserver,
    CompositeObserver,
    LoggingObserver,
    NullObserver,
    RecordingObserver,
)
from megaverse.execution.retry import NO_RETRY, RetryPolicy, backoff_delay_ms, is_transient, with_retry

__all__ = [
    "NO_RETRY",
    "ActionOutcome",
    "BatchEvent",
    "BatchObserver",
    "BatchResult",
    "BatchRunner",
    "CompositeObserver",
    "Limiter",
    "LoggingObserver",
    "NullObserver",
    "RecordingObserver",
    "RetryPolicy",
    "backoff_delay_ms",
    "is_transient",
    "list_only",
    "run_all",
    "with_retry",
]
