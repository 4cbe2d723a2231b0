"""
Structured error types for megaverse.

Every failure the tool can raise is a ``MegaverseError`` carrying a
category, an explicit ``retryable`` flag and an optional chained cause.
The retry executor decides what to do with a failure from these typed
fields alone: it never probes arbitrary attributes on foreign exceptions.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                      MegaverseError                           │
        │          (category, retryable, cause, to_dict())             │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ValidationError        ConfigError        RemoteError        │
        │  (VALIDATION)           (CONFIG)           (REMOTE, status)   │
        │       │                      │                  │              │
        │  GridDimensionError     MissingConfigError                    │
        │  LimiterConfigError                                           │
        │  UnrecognizedTokenError GoalFormatError                       │
        │  ShapeError             (SOURCE)                              │
        │                                                               │
        │                         RetriesExhaustedError                 │
        │                         (EXECUTION, last_error, attempts)     │
        └──────────────────────────────────────────────────────────────┘

Classification:
    - **Validation / config errors** are raised synchronously while the run
      is being set up and abort it before any remote call is made.
    - **RemoteError** is what the HTTP client raises. ``status`` is ``None``
      for network-level faults; otherwise the HTTP status code.
      ``429`` and ``5xx`` are transient, every other status is fatal.
    - **RetriesExhaustedError** wraps the last transient failure once the
      retry budget of a call is used up.

Examples:
    >>> err = RemoteError("POST /polyanets failed", status=503)
    >>> err.retryable
    True
    >>> RemoteError("POST /polyanets failed", status=404).retryable
    False
    >>> RemoteError("connection reset").retryable
    True

Tags:
    error-handling, exception-hierarchy, retry-logic, megaverse
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Coarse error categories used for logging and reporting."""

    VALIDATION = "VALIDATION"     # Bad dimensions, tokens, concurrency
    CONFIG = "CONFIG"             # Missing or invalid settings
    REMOTE = "REMOTE"             # HTTP status or transport failure
    SOURCE = "SOURCE"             # Goal payload did not have the expected shape
    EXECUTION = "EXECUTION"       # Retry budget exhausted
    UNKNOWN = "UNKNOWN"


class MegaverseError(Exception):
    """
    Base exception for all megaverse errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    call sites only pass what differs from the defaults.

    Attributes:
        message: Human-readable description
        category: ErrorCategory for routing and reporting
        retryable: Whether the operation may be attempted again
        cause: Underlying exception, also set as ``__cause__``
    """

    default_category: ErrorCategory = ErrorCategory.UNKNOWN
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category if category is not None else self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


# =============================================================================
# Validation errors
# =============================================================================


class ValidationError(MegaverseError):
    """Invalid input detected before any remote call. Never retryable."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class GridDimensionError(ValidationError):
    """Grid height or width is not a positive integer."""


class LimiterConfigError(ValidationError):
    """Limiter concurrency is lower than one."""


class ShapeError(ValidationError):
    """Shape parameters are invalid (e.g. an even box size)."""


class UnrecognizedTokenError(ValidationError):
    """A goal token does not belong to the token grammar."""

    def __init__(self, token: str):
        super().__init__(f"Unrecognized token: {token!r}")
        self.token = token


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigError(MegaverseError):
    """Invalid configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """A required setting is absent."""

    def __init__(self, setting: str):
        super().__init__(f"{setting} is required")
        self.setting = setting


# =============================================================================
# Remote errors
# =============================================================================


def status_is_transient(status: int | None) -> bool:
    """Return True for statuses worth retrying.

    ``None`` means no HTTP response was received at all.
    """
    match status:
        case None:
            return True
        case 429:
            return True
        case int() if status >= 500:
            return True
        case _:
            return False


class RemoteError(MegaverseError):
    """A remote call failed.

    Attributes:
        status: HTTP status code, or ``None`` for network-level faults
    """

    default_category = ErrorCategory.REMOTE

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, retryable=status_is_transient(status), cause=cause)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status is not None:
            result["status"] = self.status
        return result


class GoalFormatError(MegaverseError):
    """The goal endpoint answered, but not with a ``goal`` matrix."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class RetriesExhaustedError(MegaverseError):
    """A transient failure persisted through every retry.

    Attributes:
        last_error: The failure of the final attempt
        attempts: Total number of attempts made
    """

    default_category = ErrorCategory.EXECUTION
    default_retryable = False

    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(
            f"Gave up after {attempts} attempt(s): {last_error}",
            cause=last_error,
        )
        self.last_error = last_error
        self.attempts = attempts

    @property
    def status(self) -> int | None:
        """Status of the last attempt, if it was a RemoteError."""
        if isinstance(self.last_error, RemoteError):
            return self.last_error.status
        return None


__all__ = [
    "ErrorCategory",
    "MegaverseError",
    "ValidationError",
    "GridDimensionError",
    "LimiterConfigError",
    "ShapeError",
    "UnrecognizedTokenError",
    "ConfigError",
    "MissingConfigError",
    "RemoteError",
    "GoalFormatError",
    "RetriesExhaustedError",
    "status_is_transient",
]
