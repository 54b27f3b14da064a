"""Recurring task occurrence calculation - no I/O dependencies.

All functions take an explicit ``tz``. Aware datetimes are converted into it,
naive datetimes are read as wall-clock time in it, and every returned instant
is aware in ``tz``. Calendar arithmetic happens on wall-clock time, so a daily
task at 09:00 stays at 09:00 across DST changes.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum, IntEnum

from dateutil.relativedelta import relativedelta

DAY_START = time(0, 0)
DAY_END = time(23, 59)
DEFAULT_HOUR_INTERVAL = 2
DEFAULT_TIMES_PER_DAY = 3


class Frequency(Enum):
    """How often a task recurs."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"
    HOURLY = "hourly"
    TIMES_PER_DAY = "timesPerDay"

    @property
    def is_intraday(self) -> bool:
        return self in (Frequency.HOURLY, Frequency.TIMES_PER_DAY)

    @property
    def display_name(self) -> str:
        if self is Frequency.BIWEEKLY:
            return "Every 2 Weeks"
        if self is Frequency.TIMES_PER_DAY:
            return "Times Per Day"
        return self.name.capitalize()


class Weekday(IntEnum):
    """Weekday ordinals, Sunday first."""

    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7

    @classmethod
    def of(cls, d: date) -> "Weekday":
        return cls(d.isoweekday() % 7 + 1)

    @property
    def short_name(self) -> str:
        return self.name[:3].capitalize()

    @property
    def rrule_code(self) -> str:
        return self.name[:2]


@dataclass(frozen=True)
class RecurrenceRule:
    """
    A recurrence rule as stored on a task.

    Calendar-unit frequencies use ``interval`` and ``days_of_week``; intraday
    frequencies use ``hour_interval`` / ``times_per_day``, the active-hours
    window and ``specific_times``.
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: frozenset[Weekday] = frozenset()
    end_date: datetime | None = None
    hour_interval: int | None = None
    times_per_day: int | None = None
    specific_times: tuple[time, ...] = ()
    active_hours_start: time | None = None
    active_hours_end: time | None = None

    def __post_init__(self):
        object.__setattr__(self, "days_of_week", frozenset(Weekday(d) for d in self.days_of_week))
        object.__setattr__(
            self,
            "specific_times",
            tuple(sorted({t.replace(tzinfo=None) for t in self.specific_times})),
        )

        if self.interval < 1:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if self.hour_interval is not None and self.hour_interval < 1:
            raise ValueError(f"hour_interval must be positive, got {self.hour_interval}")
        if (
            self.frequency is Frequency.TIMES_PER_DAY
            and not self.specific_times
            and self.times_per_day is not None
            and self.times_per_day < 2
        ):
            raise ValueError(f"times_per_day must be at least 2, got {self.times_per_day}")
        start, end = self.active_hours()
        if start >= end:
            raise ValueError(f"active hours start {start} must be before end {end}")

    @property
    def is_intraday(self) -> bool:
        return self.frequency.is_intraday

    @property
    def hours(self) -> int:
        return self.hour_interval or DEFAULT_HOUR_INTERVAL

    @property
    def count(self) -> int:
        if self.specific_times:
            return len(self.specific_times)
        return self.times_per_day or DEFAULT_TIMES_PER_DAY

    def active_hours(self) -> tuple[time, time]:
        """Active-hours window, defaulting to the whole day."""
        return (self.active_hours_start or DAY_START, self.active_hours_end or DAY_END)

    def to_dict(self) -> dict:
        data: dict = {"frequency": self.frequency.value, "interval": self.interval}
        if self.days_of_week:
            data["daysOfWeek"] = sorted(int(d) for d in self.days_of_week)
        if self.end_date:
            data["endDate"] = self.end_date.isoformat()
        if self.hour_interval is not None:
            data["hourInterval"] = self.hour_interval
        if self.times_per_day is not None:
            data["timesPerDay"] = self.times_per_day
        if self.specific_times:
            data["specificTimes"] = [t.strftime("%H:%M") for t in self.specific_times]
        if self.active_hours_start:
            data["activeHoursStart"] = self.active_hours_start.strftime("%H:%M")
        if self.active_hours_end:
            data["activeHoursEnd"] = self.active_hours_end.strftime("%H:%M")
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RecurrenceRule":
        """Create a rule from its persisted form (see ``to_dict``)."""

        def clock(key: str) -> time | None:
            return time.fromisoformat(data[key]) if data.get(key) else None

        return cls(
            frequency=Frequency(data["frequency"]),
            interval=data.get("interval", 1),
            days_of_week=frozenset(data.get("daysOfWeek") or ()),
            end_date=datetime.fromisoformat(data["endDate"]) if data.get("endDate") else None,
            hour_interval=data.get("hourInterval"),
            times_per_day=data.get("timesPerDay"),
            specific_times=tuple(time.fromisoformat(t) for t in data.get("specificTimes") or ()),
            active_hours_start=clock("activeHoursStart"),
            active_hours_end=clock("activeHoursEnd"),
        )


def _localize(dt: datetime, tz: tzinfo) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def _instant(dt: datetime) -> datetime:
    """UTC view of an aware datetime; same-zone comparisons ignore fold."""
    return dt.astimezone(timezone.utc)


def _seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def _clock(seconds: int) -> time:
    return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)


def is_intraday(rule: RecurrenceRule) -> bool:
    """True for hourly and times-per-day rules."""
    return rule.is_intraday


def next_occurrence(rule: RecurrenceRule, from_: datetime, tz: tzinfo) -> datetime | None:
    """
    Next occurrence strictly after ``from_``.

    Returns None once the series has ended: ``end_date`` at or before
    ``from_``, or the advanced instant falling after ``end_date``.
    """
    local = _localize(from_, tz)
    end = _localize(rule.end_date, tz) if rule.end_date else None
    if end is not None and _instant(end) <= _instant(local):
        return None

    if rule.is_intraday:
        candidate = _next_intraday(rule, local, tz)
    else:
        candidate = _next_calendar_unit(rule, local)

    if end is not None and _instant(candidate) > _instant(end):
        return None
    return candidate


def _week_span(rule: RecurrenceRule) -> int:
    if rule.frequency is Frequency.BIWEEKLY:
        return 2 * rule.interval
    return rule.interval


def _next_calendar_unit(rule: RecurrenceRule, local: datetime) -> datetime:
    if rule.days_of_week and rule.frequency in (Frequency.WEEKLY, Frequency.BIWEEKLY, Frequency.CUSTOM):
        return _next_weekday(local, rule.days_of_week, _week_span(rule))

    match rule.frequency:
        case Frequency.DAILY | Frequency.CUSTOM:
            return local + timedelta(days=rule.interval)
        case Frequency.WEEKLY | Frequency.BIWEEKLY:
            return local + timedelta(weeks=_week_span(rule))
        case Frequency.MONTHLY:
            return local + relativedelta(months=rule.interval)
        case Frequency.YEARLY:
            return local + relativedelta(years=rule.interval)
    raise ValueError(f"{rule.frequency} is not a calendar-unit frequency")


def _next_weekday(local: datetime, days: frozenset[Weekday], weeks: int) -> datetime:
    """Next qualifying weekday this week, else the first one ``weeks`` weeks on."""
    today = Weekday.of(local.date())
    later = sorted(d for d in days if d > today)
    if later:
        return local + timedelta(days=later[0] - today)
    week_start = local - timedelta(days=today - Weekday.SUNDAY)
    return week_start + timedelta(weeks=weeks, days=min(days) - Weekday.SUNDAY)


def _clock_times(rule: RecurrenceRule) -> list[time]:
    start, end = rule.active_hours()
    first, last = _seconds(start), _seconds(end)

    if rule.frequency is Frequency.HOURLY:
        step = rule.hours * 3600
        return [_clock(s) for s in range(first, last + 1, step)]

    if rule.specific_times:
        return list(rule.specific_times)

    n = rule.count
    span = last - first
    return [_clock(first + i * span // (n - 1)) for i in range(n)]


def calculate_intraday_times(rule: RecurrenceRule, reference_day: date, tz: tzinfo) -> list[datetime]:
    """All of one day's occurrences for an intraday rule, in order; [] otherwise."""
    if not rule.is_intraday:
        return []
    return [datetime.combine(reference_day, t, tzinfo=tz) for t in _clock_times(rule)]


def _next_intraday(rule: RecurrenceRule, local: datetime, tz: tzinfo) -> datetime:
    for candidate in calculate_intraday_times(rule, local.date(), tz):
        if _instant(candidate) > _instant(local):
            return candidate
    tomorrow = local.date() + timedelta(days=1)
    return calculate_intraday_times(rule, tomorrow, tz)[0]


def occurrences_between(
    rule: RecurrenceRule,
    start: datetime,
    end: datetime,
    tz: tzinfo,
    limit: int = 500,
) -> list[datetime]:
    """Every occurrence in ``(start, end]``, capped at ``limit`` entries."""
    end = _localize(end, tz)
    occurrences: list[datetime] = []
    current = start
    while len(occurrences) < limit:
        current = next_occurrence(rule, current, tz)
        if current is None or _instant(current) > _instant(end):
            break
        occurrences.append(current)
    return occurrences


# ============== Coarse recurrence (external calendars) ==============


class CoarseFrequency(Enum):
    """Frequencies understood by external calendar systems."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class CoarseRecurrence:
    """Frequency + interval + weekday set + end date."""

    frequency: CoarseFrequency
    interval: int = 1
    days_of_week: frozenset[Weekday] = frozenset()
    end_date: datetime | None = None

    def to_rrule(self) -> str:
        """Render as an iCalendar RRULE line."""
        parts = [f"FREQ={self.frequency.name}"]
        if self.interval != 1:
            parts.append(f"INTERVAL={self.interval}")
        if self.days_of_week:
            parts.append("BYDAY=" + ",".join(d.rrule_code for d in sorted(self.days_of_week)))
        if self.end_date:
            if self.end_date.tzinfo is None:
                parts.append(f"UNTIL={self.end_date:%Y%m%dT%H%M%S}")
            else:
                parts.append(f"UNTIL={self.end_date.astimezone(timezone.utc):%Y%m%dT%H%M%SZ}")
        return "RRULE:" + ";".join(parts)


def can_map_to_coarse_recurrence(rule: RecurrenceRule) -> bool:
    """Intraday rules have no coarse equivalent."""
    return not rule.is_intraday


def to_coarse_recurrence(rule: RecurrenceRule) -> CoarseRecurrence | None:
    if not can_map_to_coarse_recurrence(rule):
        return None

    interval = rule.interval
    match rule.frequency:
        case Frequency.DAILY:
            frequency = CoarseFrequency.DAILY
        case Frequency.CUSTOM:
            frequency = CoarseFrequency.WEEKLY if rule.days_of_week else CoarseFrequency.DAILY
        case Frequency.WEEKLY:
            frequency = CoarseFrequency.WEEKLY
        case Frequency.BIWEEKLY:
            frequency = CoarseFrequency.WEEKLY
            interval = 2 * rule.interval
        case Frequency.MONTHLY:
            frequency = CoarseFrequency.MONTHLY
        case _:
            frequency = CoarseFrequency.YEARLY

    days = rule.days_of_week if frequency is CoarseFrequency.WEEKLY else frozenset()
    return CoarseRecurrence(frequency=frequency, interval=interval, days_of_week=days, end_date=rule.end_date)


def from_coarse_recurrence(coarse: CoarseRecurrence) -> RecurrenceRule:
    """
    Rebuild a rule from its coarse form.

    Weekly every 2 weeks comes back as biweekly and daily with interval > 1
    as custom; other shapes map one-to-one.
    """
    match coarse.frequency:
        case CoarseFrequency.DAILY if coarse.interval > 1:
            return RecurrenceRule(Frequency.CUSTOM, interval=coarse.interval, end_date=coarse.end_date)
        case CoarseFrequency.DAILY:
            return RecurrenceRule(Frequency.DAILY, end_date=coarse.end_date)
        case CoarseFrequency.WEEKLY if coarse.interval == 2:
            return RecurrenceRule(Frequency.BIWEEKLY, days_of_week=coarse.days_of_week, end_date=coarse.end_date)
        case CoarseFrequency.WEEKLY:
            return RecurrenceRule(
                Frequency.WEEKLY,
                interval=coarse.interval,
                days_of_week=coarse.days_of_week,
                end_date=coarse.end_date,
            )
        case CoarseFrequency.MONTHLY:
            return RecurrenceRule(Frequency.MONTHLY, interval=coarse.interval, end_date=coarse.end_date)
        case _:
            return RecurrenceRule(Frequency.YEARLY, interval=coarse.interval, end_date=coarse.end_date)


# ============== Display ==============

_UNITS = {
    Frequency.DAILY: "day",
    Frequency.CUSTOM: "day",
    Frequency.WEEKLY: "week",
    Frequency.BIWEEKLY: "week",
    Frequency.MONTHLY: "month",
    Frequency.YEARLY: "year",
}


def describe(rule: RecurrenceRule) -> str:
    """Human-readable description, e.g. "Every 3 days on Mon, Wed"."""
    match rule.frequency:
        case Frequency.HOURLY:
            text = f"Every {rule.hours} hour{'' if rule.hours == 1 else 's'}"
        case Frequency.TIMES_PER_DAY:
            text = f"{rule.count} time{'' if rule.count == 1 else 's'} per day"
        case _:
            text = rule.frequency.display_name
            if rule.interval > 1 and rule.frequency is not Frequency.BIWEEKLY:
                text = f"Every {rule.interval} {_UNITS[rule.frequency]}s"

    if rule.days_of_week:
        text += " on " + ", ".join(d.short_name for d in sorted(rule.days_of_week))
    if rule.end_date:
        text += f" until {rule.end_date:%b %d, %Y}"
    return text


def compact_format(rule: RecurrenceRule) -> str:
    """Short task-card form: "1d", "2w", "3/wk", "1mo", "2h", "3x/day"."""
    match rule.frequency:
        case Frequency.DAILY | Frequency.CUSTOM:
            return f"{rule.interval}d"
        case Frequency.WEEKLY if rule.days_of_week:
            return f"{len(rule.days_of_week)}/wk"
        case Frequency.WEEKLY:
            return f"{rule.interval}w"
        case Frequency.BIWEEKLY:
            return f"{2 * rule.interval}w"
        case Frequency.MONTHLY:
            return f"{rule.interval}mo"
        case Frequency.YEARLY:
            return f"{rule.interval}y"
        case Frequency.HOURLY:
            return f"{rule.hours}h"
        case _:
            return f"{rule.count}x/day"
