"""File-based suggestion feedback storage adapter."""

import json
import logging
from datetime import datetime, tzinfo
from pathlib import Path

from lazyflow.core.feedback import (
    FEEDBACK_LOG_CAP,
    FeedbackAction,
    FeedbackEvent,
    adjust_score,
    append_event,
)
from lazyflow.core.tasks import TaskCategory

logger = logging.getLogger(__name__)


class FileFeedbackStore:
    """
    JSON-file feedback store.

    Implements FeedbackLog protocol. Besides the capped event log it keeps
    each task's running score adjustment and snooze expiry.
    """

    def __init__(self, path: Path | str, cap: int = FEEDBACK_LOG_CAP):
        self.path = Path(path).expanduser()
        self.cap = cap
        self._events: tuple[FeedbackEvent, ...] = ()
        self._adjustments: dict[str, float] = {}
        self._snoozed_until: dict[str, datetime] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable feedback file {self.path}: {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Expected a JSON object in {self.path}, got {type(data).__name__}")
            return

        events = []
        for i, raw in enumerate(data.get("events", [])):
            try:
                events.append(FeedbackEvent.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping feedback event {i} in {self.path}: {e!r}")
        self._events = tuple(events)[-self.cap :]

        for task_id, value in data.get("adjustments", {}).items():
            try:
                self._adjustments[task_id] = float(value)
            except (TypeError, ValueError):
                logger.warning(f"Skipping adjustment for {task_id} in {self.path}: {value!r}")

        for task_id, value in data.get("snoozedUntil", {}).items():
            try:
                self._snoozed_until[task_id] = datetime.fromisoformat(value)
            except (TypeError, ValueError):
                logger.warning(f"Skipping snooze for {task_id} in {self.path}: {value!r}")

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(
                {
                    "events": [e.to_dict() for e in self._events],
                    "adjustments": self._adjustments,
                    "snoozedUntil": {k: v.isoformat() for k, v in self._snoozed_until.items()},
                },
                indent=2,
            )
        )

    def events(self) -> tuple[FeedbackEvent, ...]:
        """Frozen snapshot of the log, oldest first."""
        return self._events

    def record(self, event: FeedbackEvent) -> None:
        """Append an event, evicting the oldest beyond the cap."""
        self._events = append_event(self._events, event, self.cap)
        self._adjustments[event.task_id] = adjust_score(self.adjustment(event.task_id), event.action)
        self._save()

    def record_action(
        self,
        task_id: str,
        action: FeedbackAction,
        original_score: float,
        category: TaskCategory,
        now: datetime,
        tz: tzinfo,
    ) -> FeedbackEvent:
        """Build an event stamped with the local hour, record it, and apply snoozes."""
        local = now.astimezone(tz)
        event = FeedbackEvent(
            task_id=task_id,
            action=action,
            timestamp=now,
            original_score=original_score,
            task_category=category,
            hour_of_day=local.hour,
        )
        if until := action.snooze_until(now, tz):
            self._snoozed_until[task_id] = until
        self.record(event)
        return event

    def adjustment(self, task_id: str) -> float:
        return self._adjustments.get(task_id, 0.0)

    def is_snoozed(self, task_id: str, now: datetime) -> bool:
        until = self._snoozed_until.get(task_id)
        return until is not None and until > now

    def clean_expired_snoozes(self, now: datetime) -> int:
        """Drop expired snoozes; returns how many were removed."""
        before = len(self._snoozed_until)
        self._snoozed_until = {k: v for k, v in self._snoozed_until.items() if v > now}
        removed = before - len(self._snoozed_until)
        if removed:
            self._save()
        return removed
