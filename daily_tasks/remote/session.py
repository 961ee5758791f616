"""Keeps the reminder scheduler fed with the latest task snapshot."""

import asyncio

import httpx
from pydantic import ValidationError

from daily_tasks.errors import (
    ErrorCategory,
    ErrorSeverity,
    RemoteServiceError,
    StructuredLogger,
    get_logger,
)
from daily_tasks.reminders.scheduler import ReminderScheduler
from daily_tasks.remote.client import TaskServiceClient


class ReminderSession:
    """One page session: pulls tasks and settings, then reconciles."""

    def __init__(
        self,
        client: TaskServiceClient,
        scheduler: ReminderScheduler,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.client = client
        self.scheduler = scheduler
        self.logger = logger or get_logger("daily_tasks.reminders")

    async def refresh(self) -> list[str]:
        """Fetch the task list and setting, then reconcile reminders.

        A failed fetch leaves the armed reminders as they are.

        Returns:
            Keys of the reminders newly armed
        """
        try:
            tasks = await self.client.get_all_tasks()
            enabled = await self.client.get_notifications_enabled()
        except (httpx.TransportError, RemoteServiceError, ValidationError) as e:
            self.logger.log_exception(
                e,
                ErrorCategory.REMOTE,
                severity=ErrorSeverity.WARNING,
                component="reminder_session",
            )
            return []

        return self.scheduler.reconcile(tasks, enabled)

    async def run(self, interval: float, stop: asyncio.Event) -> None:
        """Refresh every ``interval`` seconds until ``stop`` is set."""
        try:
            while not stop.is_set():
                await self.refresh()
                try:
                    await asyncio.wait_for(stop.wait(), timeout=interval)
                except TimeoutError:
                    pass
        finally:
            self.close()

    def close(self) -> None:
        """End the session; pending reminders never fire."""
        self.scheduler.cancel_all()
