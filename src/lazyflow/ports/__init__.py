"""Ports - interfaces/protocols for external collaborators."""

from .task_repo import TaskRepository
from .calendar_repo import CalendarRepository
from .feedback_log import FeedbackLog

__all__ = [
    "TaskRepository",
    "CalendarRepository",
    "FeedbackLog",
]
