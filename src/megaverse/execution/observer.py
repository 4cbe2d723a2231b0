"""Batch observers — where per-action outcomes are published.

The batch runner reports every retry, success and terminal failure to a
``BatchObserver`` instead of mutating counters captured in closures.
Observers are best-effort: the runner logs and ignores anything they raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from megaverse.core.logging import get_logger
from megaverse.domain.plan import Action

logger = get_logger(__name__)


class BatchObserver(Protocol):
    def on_retry(self, action: Action, error: BaseException, attempt: int) -> None: ...

    def on_success(self, action: Action) -> None: ...

    def on_failure(self, action: Action, error: BaseException) -> None: ...


class NullObserver:
    """Discards every event."""

    def on_retry(self, action: Action, error: BaseException, attempt: int) -> None:
        pass

    def on_success(self, action: Action) -> None:
        pass

    def on_failure(self, action: Action, error: BaseException) -> None:
        pass


class LoggingObserver:
    """Logs outcomes through structlog."""

    def __init__(self, log: Any = None) -> None:
        self._log = log or logger

    def on_retry(self, action: Action, error: BaseException, attempt: int) -> None:
        self._log.warning("action.retry", action=action.describe, attempt=attempt, error=str(error))

    def on_success(self, action: Action) -> None:
        self._log.debug("action.succeeded", action=action.describe)

    def on_failure(self, action: Action, error: BaseException) -> None:
        self._log.error("action.failed", action=action.describe, error=str(error))


@dataclass(frozen=True)
class BatchEvent:
    event_type: str
    """retry / succeeded / failed"""

    action: str
    """The action's describe label"""

    timestamp: datetime
    attempt: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "action": self.action,
            "timestamp": self.timestamp.isoformat(),
            "attempt": self.attempt,
            "error": self.error,
        }


@dataclass
class RecordingObserver:
    """Keeps every event in arrival order."""

    events: list[BatchEvent] = field(default_factory=list)

    def on_retry(self, action: Action, error: BaseException, attempt: int) -> None:
        self.events.append(BatchEvent("retry", action.describe, datetime.now(UTC), attempt, str(error)))

    def on_success(self, action: Action) -> None:
        self.events.append(BatchEvent("succeeded", action.describe, datetime.now(UTC)))

    def on_failure(self, action: Action, error: BaseException) -> None:
        self.events.append(BatchEvent("failed", action.describe, datetime.now(UTC), error=str(error)))

    def of_type(self, event_type: str) -> list[BatchEvent]:
        return [e for e in self.events if e.event_type == event_type]


class CompositeObserver:
    """Fans each event out to several observers."""

    def __init__(self, *observers: BatchObserver) -> None:
        self._observers = observers

    def on_retry(self, action: Action, error: BaseException, attempt: int) -> None:
        for o in self._observers:
            o.on_retry(action, error, attempt)

    def on_success(self, action: Action) -> None:
        for o in self._observers:
            o.on_success(action)

    def on_failure(self, action: Action, error: BaseException) -> None:
        for o in self._observers:
            o.on_failure(action, error)
