"""Pure reschedule ranking - urgency and candidate scoring, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Mapping

from .conflicts import ConflictRecord
from .tasks import Priority, Task

BASE_SCORE = 50.0
PRODUCTIVE_HOURS = (9, 17)
PATTERN_BONUS_CAP = 10


class RescheduleUrgency(Enum):
    IMMEDIATE = "immediate"  # conflict in < 30 min
    HIGH = "high"  # conflict in < 2 hours, or urgent task
    MEDIUM = "medium"  # high priority task
    LOW = "low"

    @property
    def display_name(self) -> str:
        labels = {
            RescheduleUrgency.IMMEDIATE: "Act Now",
            RescheduleUrgency.HIGH: "Soon",
            RescheduleUrgency.MEDIUM: "When Convenient",
            RescheduleUrgency.LOW: "Optional",
        }
        return labels[self]


class RescheduleType(Enum):
    AFTER_CONFLICT = "afterConflict"  # right after the conflicting event
    EARLIER_TODAY = "earlierToday"
    NEXT_AVAILABLE = "nextAvailable"
    TOMORROW = "tomorrow"


_TYPE_BONUS = {
    RescheduleType.AFTER_CONFLICT: 15,
    RescheduleType.EARLIER_TODAY: 10,
    RescheduleType.NEXT_AVAILABLE: 5,
}

_TOMORROW_BONUS = {
    Priority.URGENT: -20,
    Priority.HIGH: -10,
}


@dataclass(frozen=True)
class RescheduleCandidate:
    """A candidate time proposed by the caller's slot search."""

    suggested_time: datetime
    type: RescheduleType
    reason: str = ""


@dataclass(frozen=True)
class RescheduleOption:
    suggested_time: datetime
    type: RescheduleType
    reason: str
    score: float


@dataclass(frozen=True)
class RescheduleSuggestion:
    conflict: ConflictRecord
    options: list[RescheduleOption]
    recommended_option: RescheduleOption | None
    urgency: RescheduleUrgency


@dataclass(frozen=True)
class BatchRescheduleSuggestion:
    suggestions: list[RescheduleSuggestion] = field(default_factory=list)
    can_auto_resolve: bool = False

    @property
    def total_conflicts(self) -> int:
        return len(self.suggestions)

    @property
    def resolved_count(self) -> int:
        return sum(1 for s in self.suggestions if s.recommended_option is not None)


def minutes_until(moment: datetime, now: datetime) -> float:
    return (moment - now).total_seconds() / 60


def determine_urgency(conflict_time: datetime, task: Task, now: datetime) -> RescheduleUrgency:
    """
    How soon the user should act on a conflict.

    Proximity (< 2 h) and an urgent priority each independently give HIGH.
    """
    minutes = minutes_until(conflict_time, now)
    if minutes < 30:
        return RescheduleUrgency.IMMEDIATE
    if minutes < 120 or task.priority == Priority.URGENT:
        return RescheduleUrgency.HIGH
    if task.priority == Priority.HIGH:
        return RescheduleUrgency.MEDIUM
    return RescheduleUrgency.LOW


def _local_hour(moment: datetime, tz: tzinfo) -> int:
    return moment.astimezone(tz).hour if moment.tzinfo else moment.hour


def completion_count(patterns: Mapping[str, int], task: Task, candidate_time: datetime, tz: tzinfo) -> int:
    """Past completions of the task's category at the candidate's local hour."""
    return patterns.get(f"{task.category.value}_{_local_hour(candidate_time, tz)}", 0)


def score_option(
    candidate_time: datetime,
    task: Task,
    option_type: RescheduleType,
    now: datetime,
    tz: tzinfo,
    productive_hours: tuple[int, int] = PRODUCTIVE_HOURS,
    completions: int = 0,
) -> float:
    """
    Heuristic score for one reschedule candidate (higher is better).

    Base 50; +20 for 0.5-4 h out, +10 for 4-24 h out; a bonus per option
    type, where "tomorrow" is penalised for urgent and high priority tasks;
    +10 inside the productive window (inclusive hours, local to ``tz``).
    ``completions`` (learned completions at that hour) adds up to 10 more.
    """
    score = BASE_SCORE

    hours_from_now = (candidate_time - now).total_seconds() / 3600
    if 0.5 <= hours_from_now <= 4:
        score += 20
    elif 4 < hours_from_now <= 24:
        score += 10

    if option_type is RescheduleType.TOMORROW:
        score += _TOMORROW_BONUS.get(task.priority, 5)
    else:
        score += _TYPE_BONUS[option_type]

    start_hour, end_hour = productive_hours
    if start_hour <= _local_hour(candidate_time, tz) <= end_hour:
        score += 10

    score += min(max(completions, 0), PATTERN_BONUS_CAP)

    return score


def suggest_reschedule(
    conflict: ConflictRecord,
    candidates: list[RescheduleCandidate],
    now: datetime,
    tz: tzinfo,
    productive_hours: tuple[int, int] = PRODUCTIVE_HOURS,
    patterns: Mapping[str, int] | None = None,
) -> RescheduleSuggestion:
    """
    Score and rank the candidates for one conflict.

    Options are sorted best first (ties keep the caller's order); the best
    becomes the recommendation. No candidates means no recommendation.
    ``patterns`` holds the "<category>_<hour>" completion counters.
    """
    patterns = patterns or {}
    task = conflict.task
    options = [
        RescheduleOption(
            suggested_time=c.suggested_time,
            type=c.type,
            reason=c.reason,
            score=score_option(
                c.suggested_time,
                task,
                c.type,
                now,
                tz,
                productive_hours,
                completion_count(patterns, task, c.suggested_time, tz),
            ),
        )
        for c in candidates
    ]
    options.sort(key=lambda o: o.score, reverse=True)

    return RescheduleSuggestion(
        conflict=conflict,
        options=options,
        recommended_option=options[0] if options else None,
        urgency=determine_urgency(conflict.conflict_time, task, now),
    )


def batch_reschedule(
    suggestions: list[RescheduleSuggestion],
    can_auto_resolve: bool,
) -> BatchRescheduleSuggestion:
    """Group suggestions, highest task priority first."""
    ordered = sorted(suggestions, key=lambda s: -s.conflict.task.priority)
    return BatchRescheduleSuggestion(suggestions=ordered, can_auto_resolve=can_auto_resolve)
