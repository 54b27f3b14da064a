"""Functional core - pure scheduling and ranking logic with no I/O."""

from .tasks import Task, Priority, TaskCategory
from .calendar import Event
from .recurrence import (
    RecurrenceRule,
    Frequency,
    Weekday,
    CoarseRecurrence,
    next_occurrence,
    calculate_intraday_times,
    is_intraday,
    to_coarse_recurrence,
    from_coarse_recurrence,
)
from .conflicts import ConflictRecord, ConflictSeverity, ConflictType, overlap, severity, scan_for_conflicts
from .reschedule import (
    RescheduleCandidate,
    RescheduleOption,
    RescheduleSuggestion,
    BatchRescheduleSuggestion,
    RescheduleType,
    RescheduleUrgency,
    completion_count,
    determine_urgency,
    score_option,
    suggest_reschedule,
)
from .feedback import FeedbackAction, FeedbackEvent
from .signals import BehavioralSignals, SignalThresholds, TimeBucket, extract_signals
from .ordering import sanitize, clamp, repair

__all__ = [
    # Tasks & calendar
    "Task",
    "Priority",
    "TaskCategory",
    "Event",
    # Recurrence
    "RecurrenceRule",
    "Frequency",
    "Weekday",
    "CoarseRecurrence",
    "next_occurrence",
    "calculate_intraday_times",
    "is_intraday",
    "to_coarse_recurrence",
    "from_coarse_recurrence",
    # Conflicts
    "ConflictRecord",
    "ConflictSeverity",
    "ConflictType",
    "overlap",
    "severity",
    "scan_for_conflicts",
    # Reschedule
    "RescheduleCandidate",
    "RescheduleOption",
    "RescheduleSuggestion",
    "BatchRescheduleSuggestion",
    "RescheduleType",
    "RescheduleUrgency",
    "completion_count",
    "determine_urgency",
    "score_option",
    "suggest_reschedule",
    # Feedback & signals
    "FeedbackAction",
    "FeedbackEvent",
    "BehavioralSignals",
    "SignalThresholds",
    "TimeBucket",
    "extract_signals",
    # Ordering
    "sanitize",
    "clamp",
    "repair",
]
