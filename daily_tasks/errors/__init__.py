"""Error types and structured logging."""

from daily_tasks.errors.exceptions import DailyTasksError, PrecacheError, RemoteServiceError
from daily_tasks.errors.logger import (
    ErrorCategory,
    ErrorSeverity,
    StructuredError,
    StructuredLogger,
    get_logger,
)

__all__ = [
    "DailyTasksError",
    "ErrorCategory",
    "ErrorSeverity",
    "PrecacheError",
    "RemoteServiceError",
    "StructuredError",
    "StructuredLogger",
    "get_logger",
]
