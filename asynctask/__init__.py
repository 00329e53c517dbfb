"""
Cancellable background tasks with progress reporting, for hosts that
poll from their own loop.
"""
from .body import TaskBody, CallableBody
from .cancel import CancellationFlag
from .context import ExecutionContext
from .errors import (
    IllegalState,
    IllegalStateError,
    NotStartedError,
    AlreadyRunningError,
    AlreadyFinishedError,
)
from .outcome import Outcome, ErrorCapture
from .progress import (
    ProgressStore,
    LatestProgress,
    QueuedProgress,
    AtomicSlot,
    LockedSlot,
)
from .task import Task, TaskStatus, AsyncTask
from .loop import pump_until_finished

__all__ = [
    "TaskBody",
    "CallableBody",
    "CancellationFlag",
    "ExecutionContext",
    "IllegalState",
    "IllegalStateError",
    "NotStartedError",
    "AlreadyRunningError",
    "AlreadyFinishedError",
    "Outcome",
    "ErrorCapture",
    "ProgressStore",
    "LatestProgress",
    "QueuedProgress",
    "AtomicSlot",
    "LockedSlot",
    "Task",
    "TaskStatus",
    "AsyncTask",
    "pump_until_finished",
]
