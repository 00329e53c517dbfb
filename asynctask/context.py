"""
ExecutionContext is the background side's view of a task.
"""

from __future__ import annotations
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .task import Task


class ExecutionContext:
    """
    Passed as the first argument to TaskBody.do_in_background(). It only
    exposes the two calls that are safe from the background side.
    """

    def __init__(self, task: Task):
        self._task = task

    def is_cancelled(self) -> bool:
        """Checks if the operation has been cancelled."""
        return self._task.is_cancelled()

    def publish_progress(self, progress: Any):
        """
        Stores a progress value for the controlling side. Dropped once
        the task has been cancelled.
        """
        self._task.publish_progress(progress)
