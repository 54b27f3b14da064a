"""Task repository interface."""

from typing import Protocol

from lazyflow.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for reading task snapshots from the persistent store."""

    def fetch_all(self) -> list[Task]:
        """Fetch all tasks."""
        ...
