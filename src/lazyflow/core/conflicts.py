"""Pure conflict detection - interval overlap and severity, no I/O."""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum, IntEnum

from .calendar import Event, timed_events
from .tasks import Task, filter_open


class ConflictSeverity(IntEnum):
    """How badly a task is overlapped. Ordered: LOW < MEDIUM < HIGH."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class ConflictType(Enum):
    CALENDAR_EVENT = "calendarEvent"  # task vs existing calendar event
    TASK_OVERLAP = "taskOverlap"  # two tasks overlap
    NEW_MEETING = "newMeeting"  # newly added meeting vs task


@dataclass(frozen=True)
class ConflictRecord:
    """One detected conflict, created per scan and never persisted."""

    task: Task
    conflict_time: datetime
    overlap_duration: timedelta
    severity: ConflictSeverity
    type: ConflictType
    conflicting_event: Event | None = None
    conflicting_task: Task | None = None

    def format_overlap(self) -> str:
        minutes = int(self.overlap_duration.total_seconds() // 60)
        if minutes >= 60:
            hours, rest = divmod(minutes, 60)
            return f"{hours}h {rest}m overlap" if rest else f"{hours}h overlap"
        return f"{minutes}m overlap"

    def description(self) -> str:
        match self.type:
            case ConflictType.CALENDAR_EVENT:
                title = self.conflicting_event.title if self.conflicting_event else "calendar event"
                return f'Conflicts with "{title}"'
            case ConflictType.TASK_OVERLAP:
                title = self.conflicting_task.title if self.conflicting_task else "another task"
                return f'Overlaps with "{title}"'
            case _:
                title = self.conflicting_event.title if self.conflicting_event else ""
                return f'New meeting "{title}" conflicts'


def overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> timedelta:
    """Length of the intersection of two intervals; touching intervals give zero."""
    return max(timedelta(0), min(end_a, end_b) - max(start_a, start_b))


def severity(overlap_duration: timedelta, task_duration: timedelta) -> ConflictSeverity:
    """
    Classify an overlap by the share of the task it covers.

    More than half is HIGH, more than a quarter is MEDIUM, anything else LOW.
    Raises ValueError for a non-positive task duration.
    """
    if task_duration <= timedelta(0):
        raise ValueError(f"task duration must be positive, got {task_duration}")
    ratio = overlap_duration / task_duration
    if ratio > 0.5:
        return ConflictSeverity.HIGH
    if ratio > 0.25:
        return ConflictSeverity.MEDIUM
    return ConflictSeverity.LOW


def _task_start(task: Task, events: list[Event], tz: tzinfo) -> datetime | None:
    """A linked event's start wins over the task's own due date/time."""
    if task.linked_event_id is not None:
        for event in events:
            if event.id == task.linked_event_id:
                return event.start
    return task.start_time(tz)


def detect_event_conflict(
    task: Task,
    events: list[Event],
    tz: tzinfo,
    now: datetime,
) -> ConflictRecord | None:
    """
    First timed calendar event overlapping the task.

    All-day events and the task's own linked event are ignored, as are tasks
    that have already ended.
    """
    start = _task_start(task, events, tz)
    if start is None:
        return None

    duration = task.duration()
    end = start + duration
    if end < now:
        return None

    for event in timed_events(events):
        if event.id == task.linked_event_id:
            continue
        amount = overlap(start, end, event.start, event.end)
        if amount > timedelta(0):
            return ConflictRecord(
                task=task,
                conflict_time=max(start, event.start),
                overlap_duration=amount,
                severity=severity(amount, duration),
                type=ConflictType.CALENDAR_EVENT,
                conflicting_event=event,
            )
    return None


def detect_task_overlaps(tasks: list[Task], tz: tzinfo, events: list[Event] | None = None) -> list[ConflictRecord]:
    """
    Pairwise overlaps between scheduled tasks.

    HIGH when the overlap exceeds half of the shorter task, MEDIUM otherwise.
    """
    events = events or []
    timed = [(t, _task_start(t, events, tz)) for t in tasks]
    timed = [(t, s) for t, s in timed if s is not None]

    conflicts = []
    for i, (task_a, start_a) in enumerate(timed):
        for task_b, start_b in timed[i + 1 :]:
            duration_a, duration_b = task_a.duration(), task_b.duration()
            amount = overlap(start_a, start_a + duration_a, start_b, start_b + duration_b)
            if amount <= timedelta(0):
                continue
            level = ConflictSeverity.HIGH if amount > min(duration_a, duration_b) / 2 else ConflictSeverity.MEDIUM
            conflicts.append(
                ConflictRecord(
                    task=task_a,
                    conflict_time=max(start_a, start_b),
                    overlap_duration=amount,
                    severity=level,
                    type=ConflictType.TASK_OVERLAP,
                    conflicting_task=task_b,
                )
            )
    return conflicts


def detect_new_meeting_conflicts(event: Event, tasks: list[Task], tz: tzinfo) -> list[ConflictRecord]:
    """Open tasks that a newly added meeting collides with."""
    conflicts = []
    for task in filter_open(tasks):
        start = task.start_time(tz)
        if start is None:
            continue
        duration = task.duration()
        amount = overlap(start, start + duration, event.start, event.end)
        if amount > timedelta(0):
            conflicts.append(
                ConflictRecord(
                    task=task,
                    conflict_time=max(start, event.start),
                    overlap_duration=amount,
                    severity=severity(amount, duration),
                    type=ConflictType.NEW_MEETING,
                    conflicting_event=event,
                )
            )
    return conflicts


def sort_conflicts(conflicts: list[ConflictRecord]) -> list[ConflictRecord]:
    """Most severe first, then earliest."""
    return sorted(conflicts, key=lambda c: (-c.severity, c.conflict_time))


def scan_for_conflicts(
    tasks: list[Task],
    events: list[Event],
    tz: tzinfo,
    now: datetime,
) -> list[ConflictRecord]:
    """
    Full conflict pass over open, scheduled tasks.

    Pure function - the caller supplies the calendar events for the window.
    """
    scheduled = [t for t in filter_open(tasks) if t.is_scheduled]

    conflicts = []
    for task in scheduled:
        conflict = detect_event_conflict(task, events, tz, now)
        if conflict:
            conflicts.append(conflict)
    conflicts.extend(detect_task_overlaps(scheduled, tz, events))

    return sort_conflicts(conflicts)
