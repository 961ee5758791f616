"""Remote task service access."""

from daily_tasks.remote.client import TaskServiceClient
from daily_tasks.remote.session import ReminderSession

__all__ = ["ReminderSession", "TaskServiceClient"]
