"""Suggestion feedback events and their weights - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from enum import Enum

from .tasks import TaskCategory

FEEDBACK_LOG_CAP = 200
MAX_ADJUSTMENT = 15.0


class FeedbackAction(Enum):
    STARTED_IMMEDIATELY = "startedImmediately"
    VIEWED_DETAILS = "viewedDetails"
    SNOOZED_1_HOUR = "snoozed1Hour"
    SNOOZED_EVENING = "snoozedEvening"
    SNOOZED_TOMORROW = "snoozedTomorrow"
    SKIPPED_NOT_RELEVANT = "skippedNotRelevant"
    SKIPPED_WRONG_TIME = "skippedWrongTime"
    SKIPPED_NEEDS_FOCUS = "skippedNeedsFocus"

    @property
    def adjustment_delta(self) -> float:
        """Per-task score adjustment applied when the action is recorded."""
        return _WEIGHTS[self][0]

    @property
    def polarity(self) -> int:
        """Affinity weight: +2 engaged, -2 skipped, 0 for snoozes."""
        return _WEIGHTS[self][1]

    @property
    def is_positive(self) -> bool:
        return self.polarity > 0

    @property
    def is_skip(self) -> bool:
        return self.polarity < 0

    @property
    def is_snooze(self) -> bool:
        return self in (
            FeedbackAction.SNOOZED_1_HOUR,
            FeedbackAction.SNOOZED_EVENING,
            FeedbackAction.SNOOZED_TOMORROW,
        )

    def snooze_until(self, now: datetime, tz: tzinfo) -> datetime | None:
        """
        When a snoozed suggestion may resurface.

        One hour later; 18:00 today (tomorrow once past 18:00); 09:00 tomorrow.
        """
        local = now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)
        match self:
            case FeedbackAction.SNOOZED_1_HOUR:
                return local + timedelta(hours=1)
            case FeedbackAction.SNOOZED_EVENING:
                evening = datetime.combine(local.date(), time(18, 0), tzinfo=tz)
                return evening if evening > local else evening + timedelta(days=1)
            case FeedbackAction.SNOOZED_TOMORROW:
                return datetime.combine(local.date() + timedelta(days=1), time(9, 0), tzinfo=tz)
        return None


# action -> (score adjustment delta, affinity polarity)
_WEIGHTS: dict[FeedbackAction, tuple[float, int]] = {
    FeedbackAction.STARTED_IMMEDIATELY: (5, 2),
    FeedbackAction.VIEWED_DETAILS: (1, 2),
    FeedbackAction.SNOOZED_1_HOUR: (-2, 0),
    FeedbackAction.SNOOZED_EVENING: (-3, 0),
    FeedbackAction.SNOOZED_TOMORROW: (-3, 0),
    FeedbackAction.SKIPPED_NOT_RELEVANT: (-5, -2),
    FeedbackAction.SKIPPED_WRONG_TIME: (-5, -2),
    FeedbackAction.SKIPPED_NEEDS_FOCUS: (-5, -2),
}


@dataclass(frozen=True)
class FeedbackEvent:
    """
    One user reaction to a suggestion.

    ``hour_of_day`` is captured when the event is recorded so later timezone
    changes do not shift historical analysis.
    """

    task_id: str
    action: FeedbackAction
    timestamp: datetime
    original_score: float
    task_category: TaskCategory
    hour_of_day: int

    def to_dict(self) -> dict:
        return {
            "taskID": self.task_id,
            "action": self.action.value,
            "timestamp": self.timestamp.isoformat(),
            "originalScore": self.original_score,
            "taskCategory": int(self.task_category),
            "hourOfDay": self.hour_of_day,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackEvent":
        return cls(
            task_id=str(data["taskID"]),
            action=FeedbackAction(data["action"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            original_score=float(data.get("originalScore", 0)),
            task_category=TaskCategory(data.get("taskCategory", 0)),
            hour_of_day=int(data["hourOfDay"]),
        )


def append_event(
    events: tuple[FeedbackEvent, ...] | list[FeedbackEvent],
    event: FeedbackEvent,
    cap: int = FEEDBACK_LOG_CAP,
) -> tuple[FeedbackEvent, ...]:
    """Append to the log, evicting the oldest entries beyond ``cap``."""
    log = (*events, event)
    return log[-cap:] if len(log) > cap else log


def adjust_score(current: float, action: FeedbackAction) -> float:
    """Apply an action's delta to a task's running adjustment, clamped to +/-15."""
    return max(-MAX_ADJUSTMENT, min(MAX_ADJUSTMENT, current + action.adjustment_delta))
