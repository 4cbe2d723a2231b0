"""
megaverse.core - errors, logging and settings shared by every layer.
"""

from megaverse.core.errors import (
    ConfigError,
    ErrorCategory,
    GoalFormatError,
    GridDimensionError,
    LimiterConfigError,
    MegaverseError,
    MissingConfigError,
    RemoteError,
    RetriesExhaustedError,
    ShapeError,
    UnrecognizedTokenError,
    ValidationError,
)
from megaverse.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "GoalFormatError",
    "GridDimensionError",
    "LimiterConfigError",
    "MegaverseError",
    "MissingConfigError",
    "RemoteError",
    "RetriesExhaustedError",
    "ShapeError",
    "UnrecognizedTokenError",
    "ValidationError",
    "LogContext",
    "configure_logging",
    "get_logger",
]
