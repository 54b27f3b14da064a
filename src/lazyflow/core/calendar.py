"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo


@dataclass(frozen=True)
class Event:
    """A calendar event summary from the calendar integration."""

    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    calendar: str = ""
    location: str = ""
    source: str = ""

    def duration(self) -> timedelta:
        return self.end - self.start

    @classmethod
    def from_record(cls, data: dict, tz: tzinfo | None = None) -> "Event":
        """
        Create Event from a calendar collaborator's JSON summary.

        Timestamps without an offset, including date-only all-day values,
        are read as wall time in ``tz`` when one is given.
        """

        def parse(value: str) -> datetime:
            dt = datetime.fromisoformat(value)
            if tz is not None and dt.tzinfo is None:
                return dt.replace(tzinfo=tz)
            return dt

        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            start=parse(data["start"]),
            end=parse(data["end"]),
            all_day=data.get("isAllDay", False),
            calendar=data.get("calendar", ""),
            location=data.get("location", ""),
            source=data.get("source", ""),
        )


def sort_events_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start)


def timed_events(events: list[Event]) -> list[Event]:
    """Drop all-day events, which never block a time slot."""
    return [e for e in events if not e.all_day]
