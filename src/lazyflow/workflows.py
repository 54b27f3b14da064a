"""Orchestration layer between collaborators and the functional core.

Each function fetches snapshots through the ports, runs the pure core and
returns plain values. Nothing here keeps state between calls.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Callable, Sequence, TypeVar

from .config import Config
from .core.conflicts import ConflictRecord, scan_for_conflicts
from .core.ordering import apply_ordering, repair
from .core.reschedule import BatchRescheduleSuggestion, RescheduleCandidate, batch_reschedule, suggest_reschedule
from .core.signals import BehavioralSignals, completion_histogram_from_patterns, extract_signals
from .ports import CalendarRepository, FeedbackLog, TaskRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

CandidateSource = Callable[[ConflictRecord], list[RescheduleCandidate]]


def find_conflicts(
    tasks: TaskRepository,
    calendar: CalendarRepository,
    config: Config,
    now: datetime,
    horizon: timedelta = timedelta(days=1),
) -> list[ConflictRecord]:
    """Scan open tasks against the calendar for the next ``horizon``."""
    tz = config.zone()
    events = calendar.fetch_events(now, now + horizon)
    conflicts = scan_for_conflicts(tasks.fetch_all(), events, tz, now)
    logger.info(f"Found {len(conflicts)} conflicts against {len(events)} events")
    return conflicts


def suggest_reschedules(
    conflicts: list[ConflictRecord],
    candidates_for: CandidateSource,
    config: Config,
    now: datetime,
    patterns: dict[str, int] | None = None,
) -> BatchRescheduleSuggestion:
    """
    Rank candidates for every conflict and decide whether to auto-resolve.

    ``patterns`` are the completion counters from load_completion_patterns;
    they favour hours where the task's category usually gets done.

    Auto-resolve policy: every conflict is at or below the configured
    severity and every one has a recommendation.
    """
    tz = config.zone()
    window = config.productive_window()
    suggestions = [suggest_reschedule(c, candidates_for(c), now, tz, window, patterns) for c in conflicts]

    ceiling = config.auto_resolve_severity()
    can_auto_resolve = all(
        s.conflict.severity <= ceiling and s.recommended_option is not None for s in suggestions
    )
    return batch_reschedule(suggestions, can_auto_resolve)


def load_completion_patterns(config: Config) -> dict[str, int]:
    """Read the raw "<category>_<hour>" completion counters, or {} if absent."""
    path = config.completion_patterns_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse completion patterns {path}: {e}")
        return {}
    return {str(k): int(v) for k, v in data.items()}


def build_signals(feedback: FeedbackLog, patterns: dict[str, int], config: Config) -> BehavioralSignals:
    """Extract behavioral signals from a feedback snapshot."""
    histogram = completion_histogram_from_patterns(patterns)
    return extract_signals(feedback.events(), histogram, config.signal_thresholds())


def build_signal_context(feedback: FeedbackLog, patterns: dict[str, int], config: Config) -> str:
    """Prompt digest for the suggestion model; "" during cold start."""
    signals = build_signals(feedback, patterns, config)
    return signals.to_prompt_string(config.max_displacement)


def apply_model_ordering(items: Sequence[T], candidate: Sequence[int], config: Config) -> list[T]:
    """Repair a model-proposed ordering of ``items`` and apply it."""
    ordering = repair(candidate, len(items), config.max_displacement)
    if list(candidate) != ordering:
        logger.debug(f"Repaired model ordering {list(candidate)} -> {ordering}")
    return apply_ordering(items, ordering)
