"""Calendar repository interface."""

from datetime import datetime
from typing import Protocol

from lazyflow.core.calendar import Event


class CalendarRepository(Protocol):
    """Interface for fetching calendar event summaries from any backend."""

    def fetch_events(self, start: datetime, end: datetime) -> list[Event]:
        """Fetch events overlapping the window [start, end)."""
        ...
