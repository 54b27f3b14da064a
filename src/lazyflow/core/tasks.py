"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import IntEnum

from .recurrence import RecurrenceRule

DEFAULT_DURATION = timedelta(minutes=30)


class Priority(IntEnum):
    """Task priority, ordered so that higher is more important."""

    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class TaskCategory(IntEnum):
    """Task categories, values match the persisted raw values."""

    UNCATEGORIZED = 0
    WORK = 1
    PERSONAL = 2
    HEALTH = 3
    FINANCE = 4
    SHOPPING = 5
    ERRANDS = 6
    LEARNING = 7
    HOME = 8

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Task:
    """A task snapshot handed over by the persistence layer."""

    id: str
    title: str
    priority: Priority = Priority.NONE
    category: TaskCategory = TaskCategory.UNCATEGORIZED
    due_date: date | None = None
    due_time: time | None = None
    estimated_duration: timedelta | None = None
    recurring_rule: RecurrenceRule | None = None
    linked_event_id: str | None = None
    is_completed: bool = False
    is_archived: bool = False

    @property
    def is_open(self) -> bool:
        return not self.is_completed and not self.is_archived

    @property
    def is_scheduled(self) -> bool:
        """Has a concrete clock time (or a linked calendar event)."""
        return self.linked_event_id is not None or (
            self.due_date is not None and self.due_time is not None
        )

    def duration(self) -> timedelta:
        """Estimated duration, falling back to 30 minutes when unset or non-positive."""
        if self.estimated_duration is None or self.estimated_duration <= timedelta(0):
            return DEFAULT_DURATION
        return self.estimated_duration

    def start_time(self, tz: tzinfo) -> datetime | None:
        """
        Combine due date and due time into an instant in ``tz``.

        A date without a time resolves to midnight; no due date means no start.
        """
        if self.due_date is None:
            return None
        return datetime.combine(self.due_date, self.due_time or time(0, 0), tzinfo=tz)

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """Create Task from a persisted JSON record."""
        due_date = date.fromisoformat(data["dueDate"].split("T")[0]) if data.get("dueDate") else None
        due_time = time.fromisoformat(data["dueTime"]) if data.get("dueTime") else None
        minutes = data.get("estimatedMinutes")
        rule = data.get("recurringRule")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            priority=Priority(data.get("priority", 0)),
            category=TaskCategory(data.get("category", 0)),
            due_date=due_date,
            due_time=due_time,
            estimated_duration=timedelta(minutes=minutes) if minutes is not None else None,
            recurring_rule=RecurrenceRule.from_dict(rule) if rule else None,
            linked_event_id=data.get("linkedEventId"),
            is_completed=data.get("isCompleted", False),
            is_archived=data.get("isArchived", False),
        )


def filter_open(tasks: list[Task]) -> list[Task]:
    """Drop completed and archived tasks."""
    return [t for t in tasks if t.is_open]

