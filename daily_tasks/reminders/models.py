"""Task models as returned by the remote task service."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NANOS_PER_MILLI = 1_000_000


class Task(BaseModel):
    """A task owned by the remote service. Read-only on this side."""

    # the service speaks camelCase (reminderTime, createdAt, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(description="Task identifier")
    title: str = Field(description="Short title shown in reminders")
    description: str = Field(default="", description="Optional longer text")
    completed: bool = Field(default=False)
    procrastinated: bool = Field(default=False, description="Deferred-status flag")
    reminder_time: int | None = Field(
        default=None, description="Reminder timestamp, nanoseconds since the epoch"
    )
    created_at: int = Field(default=0, description="Nanoseconds since the epoch")
    updated_at: int = Field(default=0, description="Nanoseconds since the epoch")

    @field_validator("reminder_time")
    @classmethod
    def zero_means_unset(cls, v: int | None) -> int | None:
        """A zero timestamp carries no reminder."""
        return v or None

    @property
    def key(self) -> str:
        """Stable identifier used to track this task's reminder."""
        return str(self.id)

    @property
    def reminder_epoch_millis(self) -> int | None:
        if self.reminder_time is None:
            return None
        return self.reminder_time // NANOS_PER_MILLI

    @property
    def wants_reminder(self) -> bool:
        """Has a reminder set and is still open."""
        return self.reminder_time is not None and not self.completed


class UserProfile(BaseModel):
    """Profile of the signed-in user."""

    name: str
