"""
Exceptions raised synchronously by the task lifecycle.
"""

from enum import Enum


class IllegalState(Enum):
    TASK_IS_NOT_STARTED = "pending"
    TASK_IS_ALREADY_RUNNING = "running"
    TASK_IS_ALREADY_FINISHED = "finished"


class IllegalStateError(Exception):
    """
    Raised when a lifecycle operation is called out of order, e.g.
    starting a task a second time.
    """

    def __init__(self, reason: IllegalState, message: str = ""):
        super().__init__(message or f"Task is already {reason.value}")
        self.reason = reason


class NotStartedError(IllegalStateError):
    def __init__(self, message: str = "Task has not been started"):
        super().__init__(IllegalState.TASK_IS_NOT_STARTED, message)


class AlreadyRunningError(IllegalStateError):
    def __init__(self, message: str = ""):
        super().__init__(IllegalState.TASK_IS_ALREADY_RUNNING, message)


class AlreadyFinishedError(IllegalStateError):
    def __init__(self, message: str = ""):
        super().__init__(IllegalState.TASK_IS_ALREADY_FINISHED, message)
