"""Deferred task reminders."""

from daily_tasks.reminders.clock import AsyncioClock, Clock, TimerHandle
from daily_tasks.reminders.models import Task, UserProfile
from daily_tasks.reminders.notifications import (
    InPageToaster,
    NotificationChannel,
    NotificationFacility,
    NotificationRecord,
    PermissionState,
    ReminderNotifier,
    Toast,
    ToastSink,
    UnavailableNotificationFacility,
)
from daily_tasks.reminders.scheduler import (
    CancellationToken,
    ReminderScheduler,
    ScheduledNotification,
)

__all__ = [
    "AsyncioClock",
    "CancellationToken",
    "Clock",
    "InPageToaster",
    "NotificationChannel",
    "NotificationFacility",
    "NotificationRecord",
    "PermissionState",
    "ReminderNotifier",
    "ReminderScheduler",
    "ScheduledNotification",
    "Task",
    "TimerHandle",
    "Toast",
    "ToastSink",
    "UnavailableNotificationFacility",
    "UserProfile",
]
