"""JSON file adapter - task and calendar snapshots exported by collaborators."""

import json
import logging
from datetime import datetime, tzinfo
from pathlib import Path

from lazyflow.core.calendar import Event, sort_events_by_start, timed_events
from lazyflow.core.conflicts import overlap
from lazyflow.core.tasks import Task

logger = logging.getLogger(__name__)


def _read_records(path: Path | None) -> list[dict]:
    if path is None or not path.exists():
        return []
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return []
    if not isinstance(data, list):
        logger.warning(f"Expected a JSON list in {path}, got {type(data).__name__}")
        return []
    return data


class JsonFileRepository:
    """
    Reads task and event snapshots from JSON list files.

    Implements TaskRepository and CalendarRepository protocols. Event
    timestamps without an offset are wall time in ``tz``, or in the zone of
    the requested window when no ``tz`` is set.
    """

    def __init__(
        self,
        tasks_file: Path | str | None = None,
        events_file: Path | str | None = None,
        tz: tzinfo | None = None,
    ):
        self.tasks_file = Path(tasks_file).expanduser() if tasks_file else None
        self.events_file = Path(events_file).expanduser() if events_file else None
        self.tz = tz

    def fetch_all(self) -> list[Task]:
        """Fetch all tasks."""
        return [Task.from_record(r) for r in _read_records(self.tasks_file)]

    def fetch_events(self, start: datetime, end: datetime) -> list[Event]:
        """Fetch timed events overlapping the window [start, end)."""
        tz = self.tz or start.tzinfo
        events = timed_events([Event.from_record(r, tz) for r in _read_records(self.events_file)])
        in_window = [e for e in events if overlap(e.start, e.end, start, end).total_seconds() > 0]
        return sort_events_by_start(in_window)
