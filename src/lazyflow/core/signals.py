"""Behavioral signal extraction from suggestion feedback - no I/O dependencies."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence

from .feedback import FeedbackAction, FeedbackEvent
from .tasks import TaskCategory


class TimeBucket(Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @classmethod
    def from_hour(cls, hour: int) -> "TimeBucket":
        if 5 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 17:
            return cls.AFTERNOON
        if 17 <= hour < 21:
            return cls.EVENING
        return cls.NIGHT

    @property
    def order(self) -> int:
        return list(TimeBucket).index(self)


CompletionHistogram = Mapping[tuple[TaskCategory, TimeBucket], int]


@dataclass(frozen=True)
class SignalThresholds:
    """Minimum evidence before a signal is reported."""

    cold_start_events: int = 10
    affinity_min_support: int = 6
    time_preference_min_events: int = 6
    time_preference_min_share: float = 0.65
    snooze_hotspot_min: int = 4
    skip_hotspot_min: int = 3
    completion_peak_min: int = 5


@dataclass(frozen=True)
class TimePreference:
    bucket: TimeBucket
    support: int
    share: float


@dataclass(frozen=True)
class CategoryAffinity:
    category: TaskCategory
    score: int
    support: int


@dataclass(frozen=True)
class SnoozeHotspot:
    category: TaskCategory
    bucket: TimeBucket
    count: int


@dataclass(frozen=True)
class SkipReasonHotspot:
    reason: FeedbackAction
    category: TaskCategory
    count: int


@dataclass(frozen=True)
class CompletionPeak:
    category: TaskCategory
    bucket: TimeBucket
    count: int


_SKIP_LABELS = {
    FeedbackAction.SKIPPED_NOT_RELEVANT: "'not relevant'",
    FeedbackAction.SKIPPED_WRONG_TIME: "'wrong time'",
    FeedbackAction.SKIPPED_NEEDS_FOCUS: "'needs focus'",
}


@dataclass(frozen=True)
class BehavioralSignals:
    """Compact summary of user behavior, rebuilt from scratch on every call."""

    total_events: int
    is_cold_start: bool
    time_preference: TimePreference | None = None
    category_affinity: list[CategoryAffinity] = field(default_factory=list)
    snooze_hotspot: SnoozeHotspot | None = None
    skip_reason_hotspots: list[SkipReasonHotspot] = field(default_factory=list)
    completion_peak: CompletionPeak | None = None

    def to_prompt_string(self, max_displacement: int = 2) -> str:
        """
        Deterministic digest for the suggestion prompt.

        Empty when cold or when no signal met its threshold, so the prompt is
        byte-identical to the no-signal baseline.
        """
        if self.is_cold_start:
            return ""

        lines = []
        if t := self.time_preference:
            pct = round(t.share * 100)
            lines.append(f"- Prefers engaging in the {t.bucket.value} ({pct}% of starts, n={t.support}).")

        if self.category_affinity:
            text = ", ".join(
                f"{a.category.display_name} (+{a.score}, n={a.support})" for a in self.category_affinity[:2]
            )
            lines.append(f"- Strongest categories: {text}.")

        if s := self.snooze_hotspot:
            lines.append(f"- Often snoozed: {s.category.display_name} in the {s.bucket.value} (n={s.count}).")

        for h in self.skip_reason_hotspots:
            lines.append(f"- Skips {h.category.display_name} as {_SKIP_LABELS[h.reason]} (n={h.count}).")

        if c := self.completion_peak:
            lines.append(f"- Completes {c.category.display_name} tasks most in the {c.bucket.value} (n={c.count}).")

        if not lines:
            return ""

        return "\n".join(
            [
                f"User behavior from {self.total_events} interactions:",
                *lines,
                f"Use these as soft preferences. Keep reordering within {max_displacement} positions "
                "unless strongly justified.",
            ]
        )


def extract_signals(
    events: Sequence[FeedbackEvent],
    completion_histogram: CompletionHistogram,
    thresholds: SignalThresholds = SignalThresholds(),
) -> BehavioralSignals:
    """
    Project a feedback log snapshot and completion histogram into signals.

    Pure function - neither input is mutated.
    """
    total = len(events)
    if total < thresholds.cold_start_events:
        return BehavioralSignals(total_events=total, is_cold_start=True)

    return BehavioralSignals(
        total_events=total,
        is_cold_start=False,
        time_preference=_time_preference(events, thresholds),
        category_affinity=_category_affinity(events, thresholds),
        snooze_hotspot=_snooze_hotspot(events, thresholds),
        skip_reason_hotspots=_skip_reason_hotspots(events, thresholds),
        completion_peak=_completion_peak(completion_histogram, thresholds),
    )


def _time_preference(events: Sequence[FeedbackEvent], thresholds: SignalThresholds) -> TimePreference | None:
    positive = [e for e in events if e.action.is_positive]
    if len(positive) < thresholds.time_preference_min_events:
        return None

    counts = Counter(TimeBucket.from_hour(e.hour_of_day) for e in positive)
    # Highest count, ties to the earliest bucket
    bucket, count = min(counts.items(), key=lambda kv: (-kv[1], kv[0].order))
    share = count / len(positive)
    if share < thresholds.time_preference_min_share:
        return None
    return TimePreference(bucket=bucket, support=len(positive), share=share)


def _category_affinity(events: Sequence[FeedbackEvent], thresholds: SignalThresholds) -> list[CategoryAffinity]:
    scores: Counter[TaskCategory] = Counter()
    support: Counter[TaskCategory] = Counter()
    for event in events:
        if event.action.polarity == 0:
            continue
        scores[event.task_category] += event.action.polarity
        support[event.task_category] += 1

    affinities = [
        CategoryAffinity(category=category, score=scores[category], support=n)
        for category, n in support.items()
        if n >= thresholds.affinity_min_support and scores[category] > 0
    ]
    return sorted(affinities, key=lambda a: (-a.score, -a.support, a.category))


def _snooze_hotspot(events: Sequence[FeedbackEvent], thresholds: SignalThresholds) -> SnoozeHotspot | None:
    counts = Counter(
        (e.task_category, TimeBucket.from_hour(e.hour_of_day)) for e in events if e.action.is_snooze
    )
    if not counts:
        return None

    (category, bucket), count = min(counts.items(), key=lambda kv: (-kv[1], kv[0][0], kv[0][1].order))
    if count < thresholds.snooze_hotspot_min:
        return None
    return SnoozeHotspot(category=category, bucket=bucket, count=count)


def _skip_reason_hotspots(events: Sequence[FeedbackEvent], thresholds: SignalThresholds) -> list[SkipReasonHotspot]:
    counts = Counter((e.action, e.task_category) for e in events if e.action.is_skip)
    reasons = list(FeedbackAction)
    hotspots = [
        SkipReasonHotspot(reason=reason, category=category, count=count)
        for (reason, category), count in counts.items()
        if count >= thresholds.skip_hotspot_min
    ]
    return sorted(hotspots, key=lambda h: (reasons.index(h.reason), -h.count, h.category))


def _completion_peak(histogram: CompletionHistogram, thresholds: SignalThresholds) -> CompletionPeak | None:
    qualifying = [
        (category, bucket, count)
        for (category, bucket), count in histogram.items()
        if count >= thresholds.completion_peak_min
    ]
    if not qualifying:
        return None

    category, bucket, count = min(qualifying, key=lambda p: (-p[2], p[0], p[1].order))
    return CompletionPeak(category=category, bucket=bucket, count=count)


def completion_histogram_from_patterns(patterns: Mapping[str, int]) -> dict[tuple[TaskCategory, TimeBucket], int]:
    """
    Fold persisted ``"<category>_<hour>"`` completion counters into buckets.

    Malformed keys (unknown category, hour outside 0-23) are skipped.
    """
    histogram: Counter[tuple[TaskCategory, TimeBucket]] = Counter()
    for key, count in patterns.items():
        raw_category, sep, raw_hour = key.partition("_")
        if not sep:
            continue
        try:
            category = TaskCategory(int(raw_category))
            hour = int(raw_hour)
        except ValueError:
            continue
        if not 0 <= hour <= 23:
            continue
        histogram[(category, TimeBucket.from_hour(hour))] += count
    return dict(histogram)
