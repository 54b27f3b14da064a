"""Feedback log interface."""

from typing import Protocol

from lazyflow.core.feedback import FeedbackEvent


class FeedbackLog(Protocol):
    """Append-only, capped log of suggestion feedback (single writer)."""

    def events(self) -> tuple[FeedbackEvent, ...]:
        """Frozen snapshot of the log, oldest first."""
        ...

    def record(self, event: FeedbackEvent) -> None:
        """Append an event, evicting the oldest beyond the cap."""
        ...
