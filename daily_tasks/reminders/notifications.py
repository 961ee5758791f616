"""Reminder delivery through the platform notification facility.

When the facility is missing or the user has not granted permission,
reminders are shown as in-page transient messages instead.
"""

from abc import ABC, abstractmethod
from collections import deque
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from daily_tasks.config import Settings, get_settings
from daily_tasks.errors import ErrorCategory, ErrorSeverity, StructuredLogger, get_logger
from daily_tasks.reminders.models import Task


class PermissionState(Enum):
    """Authorization state of the platform notification facility."""

    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # not yet decided


class NotificationChannel(Enum):
    """Where a reminder was delivered."""

    NATIVE = "native"
    TOAST = "toast"


class NotificationFacility(ABC):
    """Platform notification facility."""

    @property
    @abstractmethod
    def available(self) -> bool:
        pass

    @property
    @abstractmethod
    def permission(self) -> PermissionState:
        pass

    @abstractmethod
    async def request_permission(self) -> PermissionState:
        """Ask the user for authorization."""
        pass

    @abstractmethod
    def show(self, title: str, body: str, icon: str, tag: str) -> None:
        """Display a notification; a later one with the same tag replaces it."""
        pass


class UnavailableNotificationFacility(NotificationFacility):
    """Stand-in for platforms without notification support."""

    @property
    def available(self) -> bool:
        return False

    @property
    def permission(self) -> PermissionState:
        return PermissionState.DENIED

    async def request_permission(self) -> PermissionState:
        return PermissionState.DENIED

    def show(self, title: str, body: str, icon: str, tag: str) -> None:
        raise RuntimeError("Notifications are not supported on this platform")


class Toast(BaseModel):
    """A transient in-page message."""

    message: str
    description: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ToastSink(ABC):
    """In-page transient message display."""

    @abstractmethod
    def show(self, message: str, description: str | None = None) -> None:
        pass


class InPageToaster(ToastSink):
    """Keeps the most recent messages for the page to render."""

    def __init__(self, limit: int = 50, logger: StructuredLogger | None = None) -> None:
        self.messages: deque[Toast] = deque(maxlen=limit)
        self.logger = logger or get_logger("daily_tasks.reminders")

    def show(self, message: str, description: str | None = None) -> None:
        self.messages.append(Toast(message=message, description=description))
        self.logger.info("Toast: %s", message)


class NotificationRecord(BaseModel):
    """Record of a delivered reminder."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    channel: NotificationChannel
    task_key: str
    title: str
    message: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    success: bool | None = None
    error_message: str | None = None

    def mark_success(self) -> None:
        """Mark notification as successful."""
        self.success = True
        self.error_message = None

    def mark_failure(self, error: str) -> None:
        """Mark notification as failed."""
        self.success = False
        self.error_message = error


class ReminderNotifier:
    """Delivers task reminders natively, falling back to a toast."""

    def __init__(
        self,
        facility: NotificationFacility | None = None,
        toaster: ToastSink | None = None,
        config: Settings | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.config = config or get_settings()
        self.logger = logger or get_logger("daily_tasks.reminders")
        self.facility = facility or UnavailableNotificationFacility()
        self.toaster = toaster or InPageToaster(
            limit=self.config.reminders.toast_history, logger=self.logger
        )
        self.notification_history: list[NotificationRecord] = []

    @property
    def native_allowed(self) -> bool:
        return self.facility.available and self.facility.permission == PermissionState.GRANTED

    async def request_permission(self) -> PermissionState:
        """Request authorization; an absent facility resolves to denied."""
        if not self.facility.available:
            return PermissionState.DENIED
        state = await self.facility.request_permission()
        self.logger.info("Notification permission is now %s", state.value)
        return state

    def deliver(self, task: Task) -> NotificationRecord:
        """Deliver the reminder for a task."""
        if self.native_allowed:
            record = NotificationRecord(
                channel=NotificationChannel.NATIVE,
                task_key=task.key,
                title=self.config.reminders.title,
                message=task.title,
                metadata={"icon": self.config.reminders.icon, "tag": task.key},
            )
            try:
                self.facility.show(
                    title=self.config.reminders.title,
                    body=task.title,
                    icon=self.config.reminders.icon,
                    tag=task.key,
                )
                record.mark_success()
                self.notification_history.append(record)
                return record
            except Exception as e:
                record.mark_failure(str(e))
                self.notification_history.append(record)
                self.logger.log_exception(
                    e,
                    ErrorCategory.NOTIFICATION,
                    severity=ErrorSeverity.WARNING,
                    component="reminder_notifier",
                    metadata={"task_key": task.key},
                )

        return self._toast(task)

    def _toast(self, task: Task) -> NotificationRecord:
        message = f"Reminder: {task.title}"
        description = task.description or None
        record = NotificationRecord(
            channel=NotificationChannel.TOAST,
            task_key=task.key,
            title=message,
            message=description or "",
        )
        self.toaster.show(message, description)
        record.mark_success()
        self.notification_history.append(record)
        return record

    def get_recent_notifications(self, hours: int = 24) -> list[NotificationRecord]:
        """Get notifications from the last N hours."""
        cutoff = datetime.now(UTC) - timedelta(hours=hours)
        return [n for n in self.notification_history if n.timestamp >= cutoff]
