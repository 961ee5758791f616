"""Structured logging for the cache worker and reminder scheduler."""

import json
import logging
import logging.handlers
import traceback
import uuid
from datetime import UTC, datetime
from enum import Enum
from functools import cache
from typing import Any

from pydantic import BaseModel, Field

from daily_tasks.config import Settings, get_settings


class ErrorSeverity(Enum):
    """Error severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_log_level(self) -> int:
        """Convert severity to Python logging level."""
        mapping = {
            ErrorSeverity.DEBUG: logging.DEBUG,
            ErrorSeverity.INFO: logging.INFO,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL,
        }
        return mapping[self]


class ErrorCategory(Enum):
    """Error categories for classification."""

    NETWORK = "network"
    CACHE = "cache"
    INSTALL = "install"
    NOTIFICATION = "notification"
    SCHEDULING = "scheduling"
    REMOTE = "remote"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class StructuredError(BaseModel):
    """Structured error model for consistent logging."""

    error_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    component: str | None = None
    url: str | None = None
    error_code: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    traceback: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "component": self.component,
            "url": self.url,
            "error_code": self.error_code,
            "metadata": self.metadata,
            "traceback": self.traceback,
        }


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        if hasattr(record, "structured_error"):
            log_data = record.structured_error
        else:
            log_data = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "message": record.getMessage(),
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            }
        return json.dumps(log_data)


class StructuredLogger:
    """Logger for structured error logging."""

    def __init__(self, name: str, config: Settings | None = None) -> None:
        """Initialize structured logger."""
        self.name = name
        self.config = config or get_settings()
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up the logger with appropriate handlers."""
        logger = logging.getLogger(self.name)
        logger.setLevel(getattr(logging, self.config.logging.level))

        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()

        log_dir = self.config.logging.log_dir
        log_dir.mkdir(exist_ok=True, parents=True)

        log_file = log_dir / f"{self.name}.log"
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=self.config.logging.max_bytes,
            backupCount=self.config.logging.backup_count,
        )

        if self.config.logging.format == "json":
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )

        logger.addHandler(handler)
        return logger

    def log_error(self, error: StructuredError) -> None:
        """Log a structured error."""
        level = error.severity.to_log_level()

        if self.config.logging.format == "json":
            extra = {"structured_error": error.to_dict()}
            self.logger.log(level, error.message, extra=extra)
        else:
            message = (
                f"[{error.severity.value.upper()}] {error.message} | "
                f"Category: {error.category.value}"
            )
            if error.component:
                message += f" | Component: {error.component}"
            if error.url:
                message += f" | URL: {error.url}"
            if error.error_code:
                message += f" | Code: {error.error_code}"
            if error.metadata:
                message += f" | Metadata: {json.dumps(error.metadata)}"

            self.logger.log(level, message)

    def debug(self, message: str, *args: Any) -> None:
        self.logger.debug(message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.logger.info(message, *args)

    def warning(self, message: str, *args: Any) -> None:
        self.logger.warning(message, *args)

    def create_error_from_exception(
        self,
        exception: BaseException,
        category: ErrorCategory,
        severity: ErrorSeverity | None = None,
        component: str | None = None,
        url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StructuredError:
        """Create a structured error from an exception."""
        return StructuredError(
            message=str(exception) or exception.__class__.__name__,
            category=category,
            severity=severity or ErrorSeverity.ERROR,
            component=component,
            url=url,
            error_code=exception.__class__.__name__,
            metadata=metadata or {},
            traceback="".join(traceback.format_exception(exception)),
        )

    def log_exception(
        self,
        exception: BaseException,
        category: ErrorCategory,
        severity: ErrorSeverity | None = None,
        component: str | None = None,
        url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StructuredError:
        """Build a structured error from an exception and log it."""
        error = self.create_error_from_exception(
            exception,
            category,
            severity=severity,
            component=component,
            url=url,
            metadata=metadata,
        )
        self.log_error(error)
        return error


@cache
def get_logger(name: str = "daily_tasks") -> StructuredLogger:
    """Get or create a logger instance."""
    return StructuredLogger(name)
