"""Planner error taxonomy.

Every mutating operation validates before it builds a new task list, so any
of these propagating to the caller means nothing was changed.
"""

from __future__ import annotations

from typing import Optional


class PlannerError(ValueError):
    """Base class for user-facing planner errors."""


class InvalidDeadlineError(PlannerError):
    """Deadline is missing, unparseable or outside 1 day .. 10 years."""


class InvalidTaskError(PlannerError):
    """Task text is blank."""


class TaskNotFoundError(PlannerError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"No task with id {task_id!r}.")
        self.task_id = task_id


class CapacityExceededError(PlannerError):
    def __init__(self, message: str, *, region: int, count: int, limit: int) -> None:
        super().__init__(message)
        self.region = region
        self.count = count
        self.limit = limit


class EmptyImportError(PlannerError):
    """A CSV import produced no tasks."""


class ImportFetchError(PlannerError):
    def __init__(self, message: str, *, status: Optional[int] = None, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


__all__ = [
    "PlannerError",
    "InvalidDeadlineError",
    "InvalidTaskError",
    "TaskNotFoundError",
    "CapacityExceededError",
    "EmptyImportError",
    "ImportFetchError",
]
