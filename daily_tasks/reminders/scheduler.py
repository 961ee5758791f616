"""Deferred reminder notifications for the current page session.

``ReminderScheduler.reconcile`` is called whenever the task list or the
notifications setting changes. It keeps at most one armed timer per task
and invalidates timers whose task no longer qualifies. Timers live only
as long as the session; a new session re-reconciles from scratch and
never fires reminders that are already past due.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from daily_tasks.errors import ErrorCategory, ErrorSeverity, StructuredLogger, get_logger
from daily_tasks.reminders.clock import AsyncioClock, Clock, TimerHandle
from daily_tasks.reminders.models import Task
from daily_tasks.reminders.notifications import ReminderNotifier


class CancellationToken:
    """Set once; a cancelled timer callback must take no visible action."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(slots=True)
class ScheduledNotification:
    """A pending timer bound to one task reminder."""

    task_key: str
    fire_at_epoch_millis: int
    reminder_time: int
    task: Task
    token: CancellationToken = field(default_factory=CancellationToken)
    handle: TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return not self.token.cancelled

    def invalidate(self) -> None:
        self.token.cancel()
        if self.handle is not None:
            self.handle.cancel()


class ReminderScheduler:
    """Arms, fires and invalidates task reminders."""

    def __init__(
        self,
        notifier: ReminderNotifier,
        clock: Clock | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.notifier = notifier
        self.clock = clock or AsyncioClock()
        self.logger = logger or get_logger("daily_tasks.reminders")
        self._armed: dict[str, ScheduledNotification] = {}
        self._fired: set[str] = set()

    @property
    def armed_keys(self) -> frozenset[str]:
        return frozenset(self._armed)

    @property
    def fired_keys(self) -> frozenset[str]:
        return frozenset(self._fired)

    def get(self, task_key: str) -> ScheduledNotification | None:
        return self._armed.get(task_key)

    def reconcile(self, tasks: Iterable[Task], notifications_enabled: bool) -> list[str]:
        """Bring armed reminders in line with a task snapshot.

        Args:
            tasks: Current task list from the remote service
            notifications_enabled: The user's reminder setting

        Returns:
            Keys of the reminders armed by this call
        """
        by_key = {task.key: task for task in tasks}

        for key, scheduled in list(self._armed.items()):
            task = by_key.get(key)
            if (
                not notifications_enabled
                or task is None
                or not task.wants_reminder
                or task.reminder_time != scheduled.reminder_time
            ):
                self._invalidate(key)
            else:
                # title or description may have changed
                scheduled.task = task

        if not notifications_enabled or not by_key:
            return []

        armed = []
        now = self.clock.now_millis()
        for key, task in by_key.items():
            if not task.wants_reminder or key in self._armed or key in self._fired:
                continue

            fire_at = task.reminder_epoch_millis
            time_until_fire = fire_at - now
            if time_until_fire <= 0:
                self.logger.debug("Reminder for task %s is past due; not arming", key)
                continue

            self._arm(task, fire_at, time_until_fire)
            armed.append(key)

        return armed

    def _arm(self, task: Task, fire_at: int, delay_ms: int) -> None:
        scheduled = ScheduledNotification(
            task_key=task.key,
            fire_at_epoch_millis=fire_at,
            reminder_time=task.reminder_time,
            task=task,
        )
        token = scheduled.token
        scheduled.handle = self.clock.call_later(
            delay_ms, lambda: self._fire(task.key, token)
        )
        self._armed[task.key] = scheduled
        self.logger.debug("Armed reminder for task %s in %d ms", task.key, delay_ms)

    def _fire(self, key: str, token: CancellationToken) -> None:
        if token.cancelled:
            return
        scheduled = self._armed.get(key)
        if scheduled is None or scheduled.token is not token:
            return

        token.cancel()
        del self._armed[key]
        self._fired.add(key)
        try:
            self.notifier.deliver(scheduled.task)
        except Exception as e:
            # called from the clock, so there is no caller to raise to
            self.logger.log_exception(
                e,
                ErrorCategory.SCHEDULING,
                severity=ErrorSeverity.ERROR,
                component="reminder_scheduler",
                metadata={"task_key": key},
            )

    def _invalidate(self, key: str) -> None:
        scheduled = self._armed.pop(key, None)
        if scheduled is not None:
            scheduled.invalidate()
            self.logger.debug("Invalidated reminder for task %s", key)

    def cancel_all(self) -> None:
        """Invalidate every armed reminder, e.g. when the page goes away."""
        for key in list(self._armed):
            self._invalidate(key)
