"""Tests for reschedule urgency and option scoring."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from lazyflow.core.conflicts import ConflictRecord, ConflictSeverity, ConflictType
from lazyflow.core.reschedule import (
    RescheduleCandidate,
    RescheduleType,
    RescheduleUrgency,
    batch_reschedule,
    completion_count,
    determine_urgency,
    score_option,
    suggest_reschedule,
)
from lazyflow.core.tasks import Priority, Task, TaskCategory

TZ = ZoneInfo("America/Toronto")


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    return datetime.combine(date(2025, 1, day), time(hour, minute), tzinfo=TZ)


# Fixtures
@pytest.fixture
def now():
    return at(8, 0)


@pytest.fixture
def make_conflict():
    def _make(priority: Priority = Priority.MEDIUM, hour: int = 11, id: str = "1") -> ConflictRecord:
        task = Task(id=id, title=f"Task {id}", priority=priority)
        return ConflictRecord(
            task=task,
            conflict_time=at(hour),
            overlap_duration=timedelta(minutes=30),
            severity=ConflictSeverity.MEDIUM,
            type=ConflictType.CALENDAR_EVENT,
        )

    return _make


class TestDetermineUrgency:
    def test_within_30_minutes_is_immediate(self, now):
        task = Task(id="1", title="t")
        assert determine_urgency(now + timedelta(minutes=15), task, now) is RescheduleUrgency.IMMEDIATE

    def test_urgent_priority_is_high_even_when_far(self, now):
        task = Task(id="1", title="t", priority=Priority.URGENT)
        assert determine_urgency(now + timedelta(hours=2), task, now) is RescheduleUrgency.HIGH

    def test_proximity_alone_is_high(self, now):
        task = Task(id="1", title="t", priority=Priority.LOW)
        assert determine_urgency(now + timedelta(minutes=90), task, now) is RescheduleUrgency.HIGH

    def test_high_priority_is_medium(self, now):
        task = Task(id="1", title="t", priority=Priority.HIGH)
        assert determine_urgency(now + timedelta(hours=4), task, now) is RescheduleUrgency.MEDIUM

    def test_otherwise_low(self, now):
        task = Task(id="1", title="t", priority=Priority.MEDIUM)
        assert determine_urgency(now + timedelta(hours=4), task, now) is RescheduleUrgency.LOW

    def test_display_names(self):
        assert RescheduleUrgency.IMMEDIATE.display_name == "Act Now"
        assert RescheduleUrgency.LOW.display_name == "Optional"


class TestScoreOption:
    def test_near_after_conflict_in_productive_hours(self, now):
        task = Task(id="1", title="t")
        assert score_option(at(10), task, RescheduleType.AFTER_CONFLICT, now, TZ) == 95

    def test_later_today_outside_productive_hours(self, now):
        task = Task(id="1", title="t")
        assert score_option(at(20), task, RescheduleType.NEXT_AVAILABLE, now, TZ) == 65

    def test_too_soon_gets_no_proximity_bonus(self, now):
        task = Task(id="1", title="t")
        assert score_option(at(8, 15), task, RescheduleType.EARLIER_TODAY, now, TZ) == 60

    def test_productive_window_is_inclusive(self, now):
        task = Task(id="1", title="t")
        assert score_option(at(17), task, RescheduleType.NEXT_AVAILABLE, now, TZ) == 75

    @pytest.mark.parametrize(
        "priority, expected",
        [(Priority.LOW, 65), (Priority.HIGH, 50), (Priority.URGENT, 40)],
    )
    def test_tomorrow_depends_on_priority(self, now, priority, expected):
        task = Task(id="1", title="t", priority=priority)
        assert score_option(at(9, day=16), task, RescheduleType.TOMORROW, now, TZ) == expected

    def test_hour_is_read_in_given_timezone(self, now):
        task = Task(id="1", title="t")
        candidate = at(10).astimezone(ZoneInfo("UTC"))
        assert score_option(candidate, task, RescheduleType.AFTER_CONFLICT, now, TZ) == 95

    def test_custom_productive_window(self, now):
        task = Task(id="1", title="t")
        assert score_option(at(10), task, RescheduleType.AFTER_CONFLICT, now, TZ, (12, 18)) == 85

    @pytest.mark.parametrize("completions, expected", [(0, 95), (4, 99), (25, 105)])
    def test_completion_bonus_is_capped(self, now, completions, expected):
        task = Task(id="1", title="t")
        score = score_option(at(10), task, RescheduleType.AFTER_CONFLICT, now, TZ, completions=completions)
        assert score == expected


class TestCompletionCount:
    def test_matches_category_and_local_hour(self):
        task = Task(id="1", title="t", category=TaskCategory.WORK)
        patterns = {"1_10": 7, "2_10": 3}
        assert completion_count(patterns, task, at(10), TZ) == 7
        assert completion_count(patterns, task, at(10).astimezone(ZoneInfo("UTC")), TZ) == 7

    def test_unknown_slot(self):
        assert completion_count({"1_10": 7}, Task(id="1", title="t"), at(10), TZ) == 0


class TestSuggestReschedule:
    def test_ranks_best_first(self, make_conflict, now):
        candidates = [
            RescheduleCandidate(at(20), RescheduleType.NEXT_AVAILABLE, "Evening slot"),
            RescheduleCandidate(at(12), RescheduleType.AFTER_CONFLICT, "After meeting"),
        ]

        suggestion = suggest_reschedule(make_conflict(), candidates, now, TZ)

        assert [o.score for o in suggestion.options] == [95, 65]
        assert suggestion.recommended_option.reason == "After meeting"
        assert suggestion.urgency is RescheduleUrgency.LOW

    def test_ties_keep_caller_order(self, make_conflict, now):
        candidates = [
            RescheduleCandidate(at(20), RescheduleType.NEXT_AVAILABLE, "first"),
            RescheduleCandidate(at(21), RescheduleType.NEXT_AVAILABLE, "second"),
        ]
        suggestion = suggest_reschedule(make_conflict(), candidates, now, TZ)
        assert [o.reason for o in suggestion.options] == ["first", "second"]

    def test_no_candidates(self, make_conflict, now):
        suggestion = suggest_reschedule(make_conflict(), [], now, TZ)
        assert suggestion.options == []
        assert suggestion.recommended_option is None

    def test_learned_hours_break_ties(self, now):
        task = Task(id="1", title="Report", category=TaskCategory.WORK)
        conflict = ConflictRecord(
            task=task,
            conflict_time=at(11),
            overlap_duration=timedelta(minutes=30),
            severity=ConflictSeverity.MEDIUM,
            type=ConflictType.CALENDAR_EVENT,
        )
        candidates = [
            RescheduleCandidate(at(11), RescheduleType.NEXT_AVAILABLE, "eleven"),
            RescheduleCandidate(at(12), RescheduleType.NEXT_AVAILABLE, "noon"),
        ]

        suggestion = suggest_reschedule(conflict, candidates, now, TZ, patterns={"1_12": 3})

        assert [o.score for o in suggestion.options] == [88, 85]
        assert suggestion.recommended_option.reason == "noon"


class TestBatchReschedule:
    def test_orders_by_priority_and_counts_resolved(self, make_conflict, now):
        candidate = [RescheduleCandidate(at(12), RescheduleType.AFTER_CONFLICT)]
        low = suggest_reschedule(make_conflict(Priority.LOW, id="low"), candidate, now, TZ)
        urgent = suggest_reschedule(make_conflict(Priority.URGENT, id="urgent"), [], now, TZ)

        batch = batch_reschedule([low, urgent], can_auto_resolve=False)

        assert [s.conflict.task.id for s in batch.suggestions] == ["urgent", "low"]
        assert batch.total_conflicts == 2
        assert batch.resolved_count == 1
        assert not batch.can_auto_resolve
